"""
Dashboard State Module
ダッシュボードの表示状態（銘柄リスト・履歴・選択・フィルタ）を保持し、
定期更新と派生ビュー（フィルタ済みリスト・サマリー）を提供します。
"""
from datetime import datetime
from typing import Callable, List, Optional

from market_heatmap.constants import (
    ALL_SECTORS,
    DEFAULT_TIMEFRAME,
    HISTORY_FETCH_ERROR,
    REFRESH_INTERVAL_SECONDS,
    STOCK_FETCH_ERROR,
)
from market_heatmap.data_provider import DataProvider
from market_heatmap.log_config import get_logger
from market_heatmap.models import HistoricalPoint, Sector, Stock, Summary

logger = get_logger(__name__)


def filter_stocks(stocks: List[Stock], query: str = "", sector: str = ALL_SECTORS) -> List[Stock]:
    """
    検索文字列とセクターで銘柄を絞り込みます。

    ティッカーまたは銘柄名が検索文字列を含み（大文字小文字無視）、
    かつセクターが "all" または完全一致する銘柄を新しいリストで返します。
    """
    needle = (query or "").lower()
    return [
        s for s in stocks
        if (needle in s["ticker"].lower() or needle in s["name"].lower())
        and (sector == ALL_SECTORS or s["sector"] == sector)
    ]


def summarize(stocks: List[Stock]) -> Summary:
    """上昇率・下落率・出来高トップを算出（入力リストの順序は変更しない）"""
    if not stocks:
        return {"count": 0, "top_gainer": None, "top_loser": None, "most_active": None}
    return {
        "count": len(stocks),
        "top_gainer": sorted(stocks, key=lambda s: s["percent_change"], reverse=True)[0],
        "top_loser": sorted(stocks, key=lambda s: s["percent_change"])[0],
        "most_active": sorted(stocks, key=lambda s: s["volume"], reverse=True)[0],
    }


class DashboardState:
    """
    1セッション分のダッシュボード状態。st.session_state に1つ保持される。

    Fetch cycle: Idle -> Loading -> (Success -> Idle | Failure -> Error).
    Error は次回の取得で再び Loading に遷移する。
    """

    def __init__(
        self,
        provider: type = DataProvider,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.provider = provider
        self.clock = clock

        self.stocks: List[Stock] = []
        self.sectors: List[Sector] = []
        self.historical: List[HistoricalPoint] = []

        self.loading = False
        self.error: Optional[str] = None
        self.last_updated: Optional[datetime] = None
        # 成否に関わらず最後に取得を試みた時刻（定期更新の判定に使用）
        self.last_attempt: Optional[datetime] = None

        self.search_query = ""
        self.selected_sector = ALL_SECTORS
        self.selected_timeframe = DEFAULT_TIMEFRAME
        self.selected_ticker: Optional[str] = None

        self._history_generation = 0

    # --- 定期更新 ---

    def needs_refresh(self, now: Optional[datetime] = None) -> bool:
        """未試行、または前回の取得試行から更新間隔が経過していればTrue"""
        if self.last_attempt is None:
            return True
        now = now or self.clock()
        return (now - self.last_attempt).total_seconds() >= REFRESH_INTERVAL_SECONDS

    def refresh_market_data(self) -> None:
        """銘柄リストとセクターリストを丸ごと置き換える"""
        self.loading = True
        self.last_attempt = self.clock()
        try:
            stocks = self.provider.fetch_stock_data()
            sectors = self.provider.fetch_sector_data()
            self.stocks = list(stocks)
            self.sectors = list(sectors)
            self.last_updated = self.last_attempt
            self.error = None
        except Exception as e:
            logger.exception(f"Error fetching data: {e}")
            self.error = STOCK_FETCH_ERROR
        finally:
            self.loading = False

    # --- 選択 ---

    def select_ticker(self, ticker: Optional[str]) -> None:
        if ticker == self.selected_ticker:
            return
        self.selected_ticker = ticker
        self.refresh_history()

    def select_timeframe(self, timeframe: str) -> None:
        if timeframe == self.selected_timeframe:
            return
        self.selected_timeframe = timeframe
        self.refresh_history()

    # --- 履歴 ---

    def begin_history_request(self) -> int:
        """新しい世代トークンを発行（以前のリクエストは無効化される）"""
        self._history_generation += 1
        return self._history_generation

    def apply_history(self, token: int, points: List[HistoricalPoint]) -> bool:
        """最新トークンの結果のみ反映する。反映した場合True"""
        if token != self._history_generation:
            logger.info(f"Discarding stale history result (token {token}, latest {self._history_generation})")
            return False
        self.historical = list(points)
        self.error = None
        return True

    def refresh_history(self) -> None:
        """選択中の銘柄・期間の履歴を取得。銘柄未選択なら何もしない"""
        if self.selected_ticker is None:
            return
        token = self.begin_history_request()
        # 前の銘柄・期間の系列は残さない
        self.historical = []
        self.loading = True
        try:
            points = self.provider.fetch_historical_data(self.selected_ticker, self.selected_timeframe)
            self.apply_history(token, points)
        except Exception as e:
            logger.exception(f"Error fetching historical data: {e}")
            self.error = HISTORY_FETCH_ERROR
        finally:
            self.loading = False

    # --- 派生ビュー ---

    def filtered_stocks(self) -> List[Stock]:
        return filter_stocks(self.stocks, self.search_query, self.selected_sector)

    def summary(self) -> Summary:
        return summarize(self.stocks)
