"""
Polygon APIクライアントモジュール
ティッカー一覧・最新約定・前日終値・企業情報・集計バーを取得します。
リトライは行わず、失敗は例外として呼び出し側（DataProvider）に伝えます。
"""
from typing import Any, Dict, List

import requests

from market_heatmap.constants import POLYGON_BASE_URL, TICKER_LIST_LIMIT
from market_heatmap.log_config import get_logger
from market_heatmap.network import safe_request
from market_heatmap.settings_storage import get_polygon_api_key

logger = get_logger(__name__)


# --- Custom Exceptions ---
class PolygonError(Exception):
    """Base exception for Polygon client errors."""
    pass

class PolygonConfigError(PolygonError):
    """Raised when API key is missing or invalid."""
    pass

class PolygonRateLimitError(PolygonError):
    """Raised when rate limit is exceeded."""
    pass

class PolygonNetworkError(PolygonError):
    """Raised when network issues occur."""
    pass


# --- クライアント設定 ---

def _get_api_key() -> str:
    """APIキーを取得"""
    return get_polygon_api_key()


def is_configured() -> bool:
    """Polygon APIが設定済みか確認"""
    return _get_api_key() != ""


def _get(path: str, params: dict = None) -> Dict[str, Any]:
    """
    Polygon REST APIへのGETリクエスト。

    Args:
        path: APIパス (e.g. "/v3/reference/tickers")
        params: クエリパラメータ（apiKeyは自動付与）

    Returns:
        レスポンスJSON

    Raises:
        PolygonConfigError: APIキー未設定または認証エラー
        PolygonRateLimitError: 429
        PolygonNetworkError: 通信エラー
        PolygonError: その他のAPIエラー・不正なJSON
    """
    api_key = _get_api_key()
    if not api_key:
        raise PolygonConfigError("Polygon API key is not configured")

    query = dict(params or {})
    query["apiKey"] = api_key

    try:
        response = safe_request(f"{POLYGON_BASE_URL}{path}", params=query)
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 429:
            logger.warning(f"[POLYGON_WARN] Rate Limit (429) on {path}")
            raise PolygonRateLimitError(f"Rate limit exceeded: {path}") from e
        if status in (401, 403):
            logger.error(f"[POLYGON_ERROR] Permission Denied ({status})")
            raise PolygonConfigError(f"Invalid API Key or Permission Denied ({status})") from e
        raise PolygonError(f"API Error ({status}) on {path}") from e
    except requests.exceptions.RequestException as e:
        raise PolygonNetworkError(f"Network Error on {path}: {type(e).__name__}") from e

    try:
        return response.json()
    except ValueError as e:
        raise PolygonError(f"Invalid JSON from {path}") from e


# --- 参照データ ---

def list_tickers(limit: int = TICKER_LIST_LIMIT) -> List[str]:
    """
    時価総額順のアクティブ銘柄ティッカー一覧を取得。

    Returns:
        ティッカーのリスト（APIの並び順）
    """
    data = _get(
        "/v3/reference/tickers",
        params={
            "market": "stocks",
            "active": "true",
            "sort": "market_cap",
            "order": "desc",
            "limit": limit,
        },
    )
    return [item["ticker"] for item in data["results"]]


def get_ticker_details(ticker: str) -> Dict[str, Any]:
    """企業情報 (name, market_cap, sic_description 等) を取得"""
    data = _get(f"/v3/reference/tickers/{ticker}")
    return data["results"]


# --- 株価データ ---

def get_last_trade(ticker: str) -> Dict[str, Any]:
    """
    最新約定を取得。

    Returns:
        {"p": 約定価格, "s": 約定数量, ...}
    """
    data = _get(f"/v2/last/trade/{ticker}")
    return data["results"]


def get_previous_close(ticker: str, date: str) -> float:
    """指定日 (YYYY-MM-DD) の終値を取得"""
    data = _get(f"/v1/open-close/{ticker}/{date}")
    return float(data["close"])


def get_aggregates(
    ticker: str,
    multiplier: int,
    timespan: str,
    from_date: str,
    to_date: str,
) -> List[Dict[str, Any]]:
    """
    集計バー（OHLCV）を取得。

    Args:
        ticker: ティッカーシンボル
        multiplier: バー幅の倍率
        timespan: "hour" / "day" 等
        from_date: 開始日 (YYYY-MM-DD)
        to_date: 終了日 (YYYY-MM-DD)

    Returns:
        [{"t": epoch ms, "o", "h", "l", "c", "v"}, ...]。結果なしは空リスト
    """
    data = _get(
        f"/v2/aggs/ticker/{ticker}/range/{multiplier}/{timespan}/{from_date}/{to_date}",
        params={"adjusted": "true", "sort": "asc"},
    )
    return data.get("results") or []
