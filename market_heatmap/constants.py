"""
Global Constants for the Stock Heatmap Dashboard.
"""

# Polygon API
POLYGON_BASE_URL = "https://api.polygon.io"
TICKER_LIST_LIMIT = 100
MAX_TICKERS = 20

# Refresh cadence (Seconds)
REFRESH_INTERVAL_SECONDS = 60

# Cache Settings (Seconds)
CACHE_TTL_SHORT = 60  # 1 min
CACHE_TTL_LONG = 3600  # 1 hour

# Filters
ALL_SECTORS = "all"

# Timeframes: key -> (label, synthetic day count, bar timespan)
TIMEFRAMES = {
    "1d": {"label": "1 Day", "days": 1, "timespan": "hour"},
    "1w": {"label": "1 Week", "days": 7, "timespan": "day"},
    "1m": {"label": "1 Month", "days": 30, "timespan": "day"},
    "3m": {"label": "3 Months", "days": 90, "timespan": "day"},
    "1y": {"label": "1 Year", "days": 365, "timespan": "day"},
}
DEFAULT_TIMEFRAME = "1d"
DEFAULT_HISTORY_DAYS = 30

# Percent change validation modes
PERCENT_MODE_TRUST = "trust"
PERCENT_MODE_WARN = "warn"
PERCENT_MODE_RECOMPUTE = "recompute"
PERCENT_CHANGE_MODES = (PERCENT_MODE_TRUST, PERCENT_MODE_WARN, PERCENT_MODE_RECOMPUTE)
PERCENT_CHANGE_TOLERANCE = 0.05  # percentage points

# Themes
THEME_LIGHT = "light"
THEME_DARK = "dark"

# User-visible error messages
STOCK_FETCH_ERROR = "Failed to fetch stock data. Please try again later."
HISTORY_FETCH_ERROR = "Failed to fetch historical data. Please try again later."
