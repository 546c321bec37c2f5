"""
モックデータモジュール
API制限・障害時に使用する固定銘柄リストと、合成OHLCV履歴の生成を提供します。
"""
import copy
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np

from market_heatmap.constants import DEFAULT_HISTORY_DAYS, TIMEFRAMES
from market_heatmap.models import HistoricalPoint, Sector, Stock


MOCK_STOCKS: List[Stock] = [
    {"ticker": "AAPL", "name": "Apple Inc.", "price": 175.34, "previous_close": 173.21,
     "percent_change": 1.23, "volume": 65432100, "market_cap": 2800000000000, "sector": "Technology"},
    {"ticker": "MSFT", "name": "Microsoft Corp.", "price": 325.76, "previous_close": 320.45,
     "percent_change": 1.66, "volume": 32145600, "market_cap": 2400000000000, "sector": "Technology"},
    {"ticker": "GOOGL", "name": "Alphabet Inc.", "price": 142.89, "previous_close": 145.23,
     "percent_change": -1.61, "volume": 28456700, "market_cap": 1800000000000, "sector": "Technology"},
    {"ticker": "AMZN", "name": "Amazon.com Inc.", "price": 132.45, "previous_close": 135.67,
     "percent_change": -2.37, "volume": 45678900, "market_cap": 1350000000000, "sector": "Consumer Cyclical"},
    {"ticker": "META", "name": "Meta Platforms Inc.", "price": 315.67, "previous_close": 310.23,
     "percent_change": 1.75, "volume": 25678900, "market_cap": 800000000000, "sector": "Technology"},
    {"ticker": "TSLA", "name": "Tesla Inc.", "price": 245.67, "previous_close": 250.34,
     "percent_change": -1.87, "volume": 78945600, "market_cap": 780000000000, "sector": "Consumer Cyclical"},
    {"ticker": "NVDA", "name": "NVIDIA Corp.", "price": 435.23, "previous_close": 425.67,
     "percent_change": 2.25, "volume": 56789000, "market_cap": 1070000000000, "sector": "Technology"},
    {"ticker": "JPM", "name": "JPMorgan Chase & Co.", "price": 145.67, "previous_close": 147.89,
     "percent_change": -1.5, "volume": 15678900, "market_cap": 425000000000, "sector": "Financial Services"},
    {"ticker": "BAC", "name": "Bank of America Corp.", "price": 32.45, "previous_close": 33.21,
     "percent_change": -2.29, "volume": 45678900, "market_cap": 260000000000, "sector": "Financial Services"},
    {"ticker": "WMT", "name": "Walmart Inc.", "price": 65.34, "previous_close": 64.56,
     "percent_change": 1.21, "volume": 12345600, "market_cap": 520000000000, "sector": "Consumer Defensive"},
    {"ticker": "PG", "name": "Procter & Gamble Co.", "price": 156.78, "previous_close": 155.43,
     "percent_change": 0.87, "volume": 8765400, "market_cap": 370000000000, "sector": "Consumer Defensive"},
    {"ticker": "JNJ", "name": "Johnson & Johnson", "price": 165.43, "previous_close": 167.89,
     "percent_change": -1.47, "volume": 7654300, "market_cap": 430000000000, "sector": "Healthcare"},
    {"ticker": "UNH", "name": "UnitedHealth Group Inc.", "price": 475.67, "previous_close": 480.23,
     "percent_change": -0.95, "volume": 3456700, "market_cap": 440000000000, "sector": "Healthcare"},
    {"ticker": "HD", "name": "Home Depot Inc.", "price": 345.67, "previous_close": 340.23,
     "percent_change": 1.6, "volume": 4567800, "market_cap": 350000000000, "sector": "Consumer Cyclical"},
    {"ticker": "PFE", "name": "Pfizer Inc.", "price": 32.45, "previous_close": 33.67,
     "percent_change": -3.62, "volume": 34567800, "market_cap": 180000000000, "sector": "Healthcare"},
    {"ticker": "INTC", "name": "Intel Corp.", "price": 35.67, "previous_close": 34.56,
     "percent_change": 3.21, "volume": 56789000, "market_cap": 150000000000, "sector": "Technology"},
    {"ticker": "VZ", "name": "Verizon Communications Inc.", "price": 40.23, "previous_close": 41.45,
     "percent_change": -2.94, "volume": 23456700, "market_cap": 170000000000, "sector": "Communication Services"},
    {"ticker": "KO", "name": "Coca-Cola Co.", "price": 58.67, "previous_close": 57.89,
     "percent_change": 1.35, "volume": 15678900, "market_cap": 250000000000, "sector": "Consumer Defensive"},
    {"ticker": "DIS", "name": "Walt Disney Co.", "price": 95.67, "previous_close": 93.45,
     "percent_change": 2.38, "volume": 12345600, "market_cap": 175000000000, "sector": "Communication Services"},
    {"ticker": "MRK", "name": "Merck & Co. Inc.", "price": 105.34, "previous_close": 104.56,
     "percent_change": 0.75, "volume": 8765400, "market_cap": 265000000000, "sector": "Healthcare"},
]

MOCK_SECTORS: List[Sector] = [
    {"id": 1, "name": "Technology"},
    {"id": 2, "name": "Financial Services"},
    {"id": 3, "name": "Healthcare"},
    {"id": 4, "name": "Consumer Cyclical"},
    {"id": 5, "name": "Consumer Defensive"},
    {"id": 6, "name": "Communication Services"},
    {"id": 7, "name": "Energy"},
    {"id": 8, "name": "Industrials"},
    {"id": 9, "name": "Basic Materials"},
    {"id": 10, "name": "Real Estate"},
    {"id": 11, "name": "Utilities"},
]

# 日次ボラティリティ 2%
DAILY_VOLATILITY = 0.02


def get_mock_stocks() -> List[Stock]:
    """固定銘柄リストのコピーを返す（呼び出し側の変更がモジュール状態に波及しない）"""
    return copy.deepcopy(MOCK_STOCKS)


def get_mock_sectors() -> List[Sector]:
    """固定セクターリストのコピーを返す"""
    return copy.deepcopy(MOCK_SECTORS)


def timeframe_days(timeframe: str) -> int:
    """期間キーを日数に変換（未知のキーは30日）"""
    config = TIMEFRAMES.get(timeframe)
    return config["days"] if config else DEFAULT_HISTORY_DAYS


def generate_mock_historical_data(
    ticker: str,
    timeframe: str,
    rng: Optional[np.random.Generator] = None,
    now: Optional[datetime] = None,
) -> List[HistoricalPoint]:
    """
    ランダムウォークで合成OHLCV履歴を生成します。

    Args:
        ticker: 銘柄コード（値には影響しない）
        timeframe: 期間 (1d, 1w, 1m, 3m, 1y)
        rng: 乱数ジェネレータ（テスト時に固定シードを注入）
        now: 基準日時（省略時は現在時刻）

    Returns:
        古い順に並んだ days + 1 件の HistoricalPoint
    """
    rng = rng if rng is not None else np.random.default_rng()
    now = now or datetime.now()
    days = timeframe_days(timeframe)

    # 開始価格 $10〜$500
    base_price = rng.uniform(10, 500)

    data: List[HistoricalPoint] = []
    prev_close = base_price
    for i in range(days, -1, -1):
        date = now - timedelta(days=i)

        change = rng.uniform(-DAILY_VOLATILITY, DAILY_VOLATILITY)
        close = prev_close * (1 + change)
        open_price = prev_close * (1 + rng.uniform(-0.005, 0.005))
        high = max(open_price, close) * (1 + rng.uniform(0, 0.01))
        low = min(open_price, close) * (1 - rng.uniform(0, 0.01))
        volume = int(rng.integers(1_000_000, 11_000_000))

        data.append({
            "date": date.strftime("%Y-%m-%d"),
            "open": float(open_price),
            "high": float(high),
            "low": float(low),
            "close": float(close),
            "volume": volume,
        })
        prev_close = close

    return data
