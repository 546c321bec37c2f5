from datetime import datetime, timezone
from unittest.mock import patch

import pytest
import requests

from market_heatmap.constants import MAX_TICKERS
from market_heatmap.data_provider import (
    DataProvider,
    dedupe_tickers,
    history_window,
    reconcile_percent_change,
)
from market_heatmap.mock_data import MOCK_STOCKS
from market_heatmap.polygon_client import PolygonNetworkError, PolygonRateLimitError
from market_heatmap.settings_storage import set_percent_change_mode

MOCK_TICKERS = [s["ticker"] for s in MOCK_STOCKS]


def _details(ticker):
    return {"name": f"{ticker} Inc.", "market_cap": 1e9, "sic_description": "Technology"}


def _epoch_ms(*args):
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


class TestFetchStockData:
    """DataProvider.fetch_stock_data のテスト"""

    def test_every_endpoint_failing_returns_mock_set(self, api_key, mock_session):
        """全リクエストが通信エラーでも例外を出さずモック20銘柄を返す"""
        mock_session.get.side_effect = requests.exceptions.ConnectionError("offline")

        stocks = DataProvider.fetch_stock_data()

        assert [s["ticker"] for s in stocks] == MOCK_TICKERS
        assert len(stocks) == 20

    def test_missing_api_key_returns_mock_set(self):
        stocks = DataProvider.fetch_stock_data()
        assert len(stocks) == 20

    @patch("market_heatmap.data_provider.get_ticker_details", side_effect=_details)
    @patch("market_heatmap.data_provider.get_previous_close", return_value=100.0)
    @patch("market_heatmap.data_provider.get_last_trade")
    @patch("market_heatmap.data_provider.list_tickers")
    def test_failed_ticker_is_dropped(self, mock_list, mock_trade, mock_prev, mock_details):
        mock_list.return_value = ["AAPL", "MSFT", "NVDA"]

        def trade(ticker):
            if ticker == "MSFT":
                raise PolygonRateLimitError("429")
            return {"p": 110.0, "s": 5000}

        mock_trade.side_effect = trade

        stocks = DataProvider.fetch_stock_data()

        assert [s["ticker"] for s in stocks] == ["AAPL", "NVDA"]
        aapl = stocks[0]
        assert aapl["price"] == 110.0
        assert aapl["previous_close"] == 100.0
        assert aapl["percent_change"] == pytest.approx(10.0)
        assert aapl["volume"] == 5000
        assert aapl["name"] == "AAPL Inc."
        assert aapl["sector"] == "Technology"

    @patch("market_heatmap.data_provider.get_ticker_details", side_effect=_details)
    @patch("market_heatmap.data_provider.get_previous_close", return_value=100.0)
    @patch("market_heatmap.data_provider.get_last_trade", return_value={"p": 101.0, "s": 10})
    @patch("market_heatmap.data_provider.list_tickers")
    def test_tickers_are_unique(self, mock_list, mock_trade, mock_prev, mock_details):
        mock_list.return_value = ["AAPL", "MSFT", "AAPL", "GOOGL", "MSFT"]

        tickers = [s["ticker"] for s in DataProvider.fetch_stock_data()]

        assert tickers == ["AAPL", "MSFT", "GOOGL"]

    @patch("market_heatmap.data_provider.get_ticker_details", side_effect=_details)
    @patch("market_heatmap.data_provider.get_previous_close", return_value=100.0)
    @patch("market_heatmap.data_provider.get_last_trade", return_value={"p": 101.0, "s": 10})
    @patch("market_heatmap.data_provider.list_tickers")
    def test_only_first_twenty_tickers_are_fetched(self, mock_list, mock_trade, mock_prev, mock_details):
        mock_list.return_value = [f"T{i:03d}" for i in range(40)]

        stocks = DataProvider.fetch_stock_data()

        assert len(stocks) == MAX_TICKERS
        assert mock_trade.call_count == MAX_TICKERS

    @patch("market_heatmap.data_provider.get_last_trade", side_effect=PolygonNetworkError("down"))
    @patch("market_heatmap.data_provider.list_tickers", return_value=["AAPL", "MSFT"])
    def test_all_tickers_failing_returns_mock_set(self, mock_list, mock_trade):
        stocks = DataProvider.fetch_stock_data()
        assert len(stocks) == 20
        assert stocks[0]["ticker"] == "AAPL"

    @patch("market_heatmap.data_provider.get_ticker_details", return_value={"market_cap": 1e9})
    @patch("market_heatmap.data_provider.get_previous_close", return_value=100.0)
    @patch("market_heatmap.data_provider.get_last_trade", return_value={"p": 101.0, "s": 10})
    @patch("market_heatmap.data_provider.list_tickers", return_value=["AAPL"])
    def test_missing_name_drops_ticker(self, mock_list, mock_trade, mock_prev, mock_details):
        """企業名が無い銘柄は除外され、全滅ならモックに切り替わる"""
        stocks = DataProvider.fetch_stock_data()
        assert len(stocks) == 20

    @patch("market_heatmap.data_provider.get_ticker_details", return_value={"name": "Acme"})
    @patch("market_heatmap.data_provider.get_previous_close", return_value=100.0)
    @patch("market_heatmap.data_provider.get_last_trade", return_value={"p": 101.0, "s": 10})
    @patch("market_heatmap.data_provider.list_tickers", return_value=["ACME"])
    def test_optional_details_get_defaults(self, mock_list, mock_trade, mock_prev, mock_details):
        [stock] = DataProvider.fetch_stock_data()
        assert stock["market_cap"] == 0.0
        assert stock["sector"] == "Unknown"

    @patch("market_heatmap.data_provider.get_ticker_details", side_effect=_details)
    @patch("market_heatmap.data_provider.get_previous_close", return_value=0.0)
    @patch("market_heatmap.data_provider.get_last_trade", return_value={"p": 101.0, "s": 10})
    @patch("market_heatmap.data_provider.list_tickers", return_value=["ZERO"])
    def test_zero_previous_close_is_dropped(self, mock_list, mock_trade, mock_prev, mock_details):
        stocks = DataProvider.fetch_stock_data()
        assert "ZERO" not in [s["ticker"] for s in stocks]

    def test_mutating_result_does_not_leak(self):
        first = DataProvider.fetch_stock_data()
        first[0]["percent_change"] = 99.0
        first.clear()

        second = DataProvider.fetch_stock_data()
        assert second[0]["percent_change"] == 1.23

    def test_recompute_mode_applies_to_mock_set(self):
        set_percent_change_mode("recompute")

        stocks = DataProvider.fetch_stock_data()
        intc = next(s for s in stocks if s["ticker"] == "INTC")

        assert intc["percent_change"] == pytest.approx((35.67 - 34.56) / 34.56 * 100)

    def test_sector_data_is_static_list(self):
        sectors = DataProvider.fetch_sector_data()
        assert len(sectors) == 11
        assert sectors[0] == {"id": 1, "name": "Technology"}


class TestReconcilePercentChange:
    """reconcile_percent_change 関数のテスト"""

    STOCK = {
        "ticker": "TEST", "name": "Test", "price": 110.0, "previous_close": 100.0,
        "percent_change": 3.0, "volume": 1, "market_cap": 1.0, "sector": "Technology",
    }

    def test_trust_keeps_provider_value(self):
        [stock] = reconcile_percent_change([self.STOCK], "trust")
        assert stock["percent_change"] == 3.0

    def test_recompute_replaces_value_without_mutating_input(self):
        source = [dict(self.STOCK)]
        [stock] = reconcile_percent_change(source, "recompute")

        assert stock["percent_change"] == pytest.approx(10.0)
        assert source[0]["percent_change"] == 3.0

    def test_warn_logs_mismatch(self, caplog):
        [stock] = reconcile_percent_change([self.STOCK], "warn")

        assert stock["percent_change"] == 3.0
        assert "TEST percent change" in caplog.text

    def test_warn_is_quiet_within_tolerance(self, caplog):
        consistent = dict(self.STOCK, percent_change=10.01)
        reconcile_percent_change([consistent], "warn")
        assert "percent change" not in caplog.text


class TestFetchHistoricalData:
    """DataProvider.fetch_historical_data のテスト"""

    @patch("market_heatmap.data_provider.get_aggregates", return_value=[])
    def test_empty_results_fall_back_to_synthetic(self, mock_aggs):
        data = DataProvider.fetch_historical_data("AAPL", "1m")

        assert len(data) == 31
        assert [p["date"] for p in data] == sorted(p["date"] for p in data)

    @patch("market_heatmap.data_provider.get_aggregates", side_effect=PolygonNetworkError("down"))
    def test_error_falls_back_to_synthetic(self, mock_aggs):
        assert len(DataProvider.fetch_historical_data("AAPL", "1w")) == 8

    def test_missing_api_key_falls_back_to_synthetic(self):
        assert len(DataProvider.fetch_historical_data("AAPL", "3m")) == 91

    @patch("market_heatmap.data_provider.get_aggregates")
    def test_daily_bars_are_parsed_and_sorted(self, mock_aggs):
        mock_aggs.return_value = [
            {"t": _epoch_ms(2024, 3, 14), "o": 2, "h": 3, "l": 1, "c": 2.5, "v": 2000.0},
            {"t": _epoch_ms(2024, 3, 13), "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 1000.0},
        ]

        data = DataProvider.fetch_historical_data("AAPL", "1m")

        assert [p["date"] for p in data] == ["2024-03-13", "2024-03-14"]
        assert data[0] == {"date": "2024-03-13", "open": 1.0, "high": 2.0, "low": 0.5, "close": 1.5, "volume": 1000}
        assert "timestamp" not in data[1]
        ticker, multiplier, timespan = mock_aggs.call_args.args[:3]
        assert (ticker, multiplier, timespan) == ("AAPL", 1, "day")

    @patch("market_heatmap.data_provider.get_aggregates")
    def test_one_day_requests_hourly_bars_with_timestamps(self, mock_aggs):
        mock_aggs.return_value = [
            {"t": _epoch_ms(2024, 3, 14, 14), "o": 1, "h": 2, "l": 0.5, "c": 1.5, "v": 10},
            {"t": _epoch_ms(2024, 3, 14, 15), "o": 1.5, "h": 2, "l": 1, "c": 1.8, "v": 20},
        ]

        data = DataProvider.fetch_historical_data("AAPL", "1d")

        assert mock_aggs.call_args.args[2] == "hour"
        assert data[0]["timestamp"] == "2024-03-14T14:00:00+00:00"
        assert data[1]["date"] == "2024-03-14"


class TestHistoryWindow:
    """history_window 関数のテスト"""

    NOW = datetime(2024, 3, 15, 12, 0)

    @pytest.mark.parametrize(
        "timeframe,timespan,from_date",
        [
            ("1d", "hour", "2024-03-14"),
            ("1w", "day", "2024-03-08"),
            ("1m", "day", "2024-02-15"),
            ("3m", "day", "2023-12-15"),
            ("1y", "day", "2023-03-15"),
            ("unknown", "day", "2024-02-15"),
        ],
    )
    def test_window(self, timeframe, timespan, from_date):
        assert history_window(timeframe, self.NOW) == (1, timespan, from_date, "2024-03-15")

    def test_month_end_is_clamped(self):
        _, _, from_date, _ = history_window("1m", datetime(2024, 3, 31))
        assert from_date == "2024-02-29"


class TestDedupeTickers:
    def test_keeps_first_occurrence_order(self):
        assert dedupe_tickers(["B", "A", "B", "C", "A"]) == ["B", "A", "C"]
