"""表示用フォーマットヘルパー"""


def format_price(value: float) -> str:
    return f"${value:,.2f}"


def format_percent(value: float) -> str:
    return f"{value:+.2f}%"


def format_volume(value: int) -> str:
    """出来高を百万株単位で表示 (e.g. 65.43M)"""
    return f"{value / 1_000_000:.2f}M"


def format_market_cap(value: float) -> str:
    """時価総額を T/B/M 単位で表示"""
    if value >= 1e12:
        return f"${value / 1e12:.2f}T"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    return f"${value:,.0f}"
