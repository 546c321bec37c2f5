"""
Data Provider Module
ダッシュボードの唯一のデータアクセスポイント。
Polygon API から取得し、失敗時はモック／合成データに切り替えます。
呼び出し側に例外を送出しません。
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from market_heatmap.constants import (
    MAX_TICKERS,
    PERCENT_CHANGE_TOLERANCE,
    PERCENT_MODE_RECOMPUTE,
    PERCENT_MODE_TRUST,
    PERCENT_MODE_WARN,
    TICKER_LIST_LIMIT,
    TIMEFRAMES,
)
from market_heatmap.log_config import get_logger
from market_heatmap.mock_data import (
    generate_mock_historical_data,
    get_mock_sectors,
    get_mock_stocks,
)
from market_heatmap.models import HistoricalPoint, Sector, Stock
from market_heatmap.polygon_client import (
    get_aggregates,
    get_last_trade,
    get_previous_close,
    get_ticker_details,
    list_tickers,
)
from market_heatmap.settings_storage import get_percent_change_mode


logger = get_logger(__name__)

UNKNOWN_SECTOR = "Unknown"


def history_window(
    timeframe: str, now: Optional[datetime] = None
) -> Tuple[int, str, str, str]:
    """
    期間キーを集計バーの取得条件に変換します。

    Args:
        timeframe: 1d, 1w, 1m, 3m, 1y（未知のキーは1mとして扱う）
        now: 基準日時

    Returns:
        (multiplier, timespan, from_date, to_date)
    """
    now = pd.Timestamp(now or datetime.now())
    offsets = {
        "1d": pd.DateOffset(days=1),
        "1w": pd.DateOffset(days=7),
        "1m": pd.DateOffset(months=1),
        "3m": pd.DateOffset(months=3),
        "1y": pd.DateOffset(years=1),
    }
    from_date = now - offsets.get(timeframe, pd.DateOffset(months=1))
    timespan = TIMEFRAMES.get(timeframe, {}).get("timespan", "day")
    return 1, timespan, from_date.strftime("%Y-%m-%d"), now.strftime("%Y-%m-%d")


def dedupe_tickers(tickers: List[str]) -> List[str]:
    """重複ティッカーを除外（最初の出現を優先、順序維持）"""
    seen = set()
    result = []
    for ticker in tickers:
        if ticker in seen:
            continue
        seen.add(ticker)
        result.append(ticker)
    return result


def reconcile_percent_change(
    stocks: List[Stock],
    mode: str = PERCENT_MODE_TRUST,
    tolerance: float = PERCENT_CHANGE_TOLERANCE,
) -> List[Stock]:
    """
    騰落率を price / previous_close と照合します。

    trust: そのまま / warn: 乖離をログ出力 / recompute: 再計算値で置換
    入力リストは変更せず、新しいリストを返します。
    """
    result = []
    for stock in stocks:
        stock = dict(stock)
        if mode != PERCENT_MODE_TRUST and stock["previous_close"]:
            derived = (stock["price"] - stock["previous_close"]) / stock["previous_close"] * 100
            if mode == PERCENT_MODE_RECOMPUTE:
                stock["percent_change"] = derived
            elif mode == PERCENT_MODE_WARN and abs(derived - stock["percent_change"]) > tolerance:
                logger.warning(
                    f"[DATA_WARN] {stock['ticker']} percent change {stock['percent_change']:.2f}% "
                    f"differs from derived {derived:.2f}%"
                )
        result.append(stock)
    return result


def _parse_aggregate(item: Dict[str, Any], intraday: bool) -> HistoricalPoint:
    ts = datetime.fromtimestamp(item["t"] / 1000, tz=timezone.utc)
    point: HistoricalPoint = {
        "date": ts.strftime("%Y-%m-%d"),
        "open": float(item["o"]),
        "high": float(item["h"]),
        "low": float(item["l"]),
        "close": float(item["c"]),
        "volume": int(item["v"]),
    }
    if intraday:
        point["timestamp"] = ts.isoformat()
    return point


class DataProvider:
    """
    Centralized data provider for the dashboard.
    Every fetch degrades to mock or synthetic data instead of raising.
    """

    @staticmethod
    def _fetch_single_stock(ticker: str, prev_date: str) -> Optional[Stock]:
        """
        1銘柄分の株価・前日終値・企業情報を取得。
        いずれかのステップで失敗した場合はNone。
        """
        try:
            trade = get_last_trade(ticker)
            price = float(trade["p"])

            previous_close = get_previous_close(ticker, prev_date)

            details = get_ticker_details(ticker)

            return {
                "ticker": ticker,
                "name": details["name"],
                "price": price,
                "previous_close": previous_close,
                "percent_change": (price - previous_close) / previous_close * 100,
                "volume": int(trade["s"]),
                "market_cap": float(details.get("market_cap") or 0),
                "sector": details.get("sic_description") or UNKNOWN_SECTOR,
            }
        except Exception as e:
            logger.error(f"[DATA_ERROR] Error fetching data for {ticker}: {e}")
            return None

    @staticmethod
    def fetch_stock_data() -> List[Stock]:
        """
        時価総額上位銘柄のスナップショットを取得。
        全滅・一覧取得失敗時は固定モック20銘柄を返す。
        """
        stocks = DataProvider._fetch_live_stocks()
        if not stocks:
            logger.info("[DATA_INFO] No live stock data available. Using mock stocks.")
            stocks = get_mock_stocks()
        return reconcile_percent_change(stocks, get_percent_change_mode())

    @staticmethod
    def _fetch_live_stocks() -> List[Stock]:
        try:
            tickers = dedupe_tickers(list_tickers(limit=TICKER_LIST_LIMIT))
        except Exception as e:
            logger.error(f"[DATA_ERROR] Error fetching stock data: {e}")
            return []

        prev_date = (datetime.now() - timedelta(days=1)).strftime("%Y-%m-%d")
        stocks = []
        for ticker in tickers[:MAX_TICKERS]:
            stock = DataProvider._fetch_single_stock(ticker, prev_date)
            if stock is not None:
                stocks.append(stock)
        return stocks

    @staticmethod
    def fetch_sector_data() -> List[Sector]:
        """
        セクター一覧を取得。
        TODO: Polygonのセクター分類エンドポイントが使えるようになったら置き換える
        """
        return get_mock_sectors()

    @staticmethod
    def fetch_historical_data(ticker: str, timeframe: str) -> List[HistoricalPoint]:
        """
        OHLCV履歴を取得。結果が空・失敗時は合成データを返す。
        """
        try:
            multiplier, timespan, from_date, to_date = history_window(timeframe)
            results = get_aggregates(ticker, multiplier, timespan, from_date, to_date)
            if results:
                intraday = timespan != "day"
                rows = sorted(results, key=lambda item: item["t"])
                return [_parse_aggregate(item, intraday) for item in rows]
            logger.info(f"[DATA_INFO] No historical bars for {ticker} ({timeframe}). Using synthetic data.")
        except Exception as e:
            logger.error(f"[DATA_ERROR] Error fetching historical data for {ticker}: {e}")

        return generate_mock_historical_data(ticker, timeframe)
