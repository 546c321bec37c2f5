"""
Data Models for Type Hinting
Using TypedDict for dictionary-based structures (API payloads, pandas rows).
"""
from typing import Optional, TypedDict


class Stock(TypedDict):
    """One traded instrument at the current polling instant."""
    ticker: str
    name: str
    price: float
    previous_close: float
    percent_change: float
    volume: int
    market_cap: float
    sector: str


class _HistoricalPointBase(TypedDict):
    date: str  # YYYY-MM-DD
    open: float
    high: float
    low: float
    close: float
    volume: int


class HistoricalPoint(_HistoricalPointBase, total=False):
    """One OHLCV bar. ``timestamp`` is set for intraday bars only."""
    timestamp: str


class Sector(TypedDict):
    id: int
    name: str


class Summary(TypedDict):
    """Summary card data derived from a stock list."""
    count: int
    top_gainer: Optional[Stock]
    top_loser: Optional[Stock]
    most_active: Optional[Stock]
