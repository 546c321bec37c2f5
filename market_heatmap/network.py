"""
Centralized Networking Module
Provides a shared session with User-Agent, timeouts, and short-lived caching.
"""

import requests
import requests_cache
import streamlit as st

from market_heatmap.constants import CACHE_TTL_LONG, CACHE_TTL_SHORT
from market_heatmap.log_config import get_logger

logger = get_logger(__name__)

# Constants
DEFAULT_TIMEOUT = 10  # seconds
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


@st.cache_resource
def get_session(
    cache_name: str = "market_cache", expire_after: int = CACHE_TTL_SHORT
) -> requests.Session:
    """
    Returns a configured requests session.
    Quotes are cached no longer than one refresh interval.
    Company details (name, market cap, sector) are kept for an hour.
    """
    try:
        session = requests_cache.CachedSession(
            cache_name,
            backend="memory",
            expire_after=expire_after,
            urls_expire_after={"api.polygon.io/v3/reference/tickers/*": CACHE_TTL_LONG},
        )
    except Exception as e:
        logger.error(f"Failed to initialize cache: {e}. Using standard session.")
        session = requests.Session()

    session.headers.update({"User-Agent": USER_AGENT})
    return session


def safe_request(
    url: str, params: dict = None, timeout: int = DEFAULT_TIMEOUT
) -> requests.Response:
    """
    Wrapper for safe HTTP GET requests with error handling.
    """
    session = get_session()
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response
    except requests.exceptions.RequestException as e:
        # params (apiKey含む) はログに出さない
        logger.error(f"Request failed for {url}: {type(e).__name__}")
        raise e
