"""
Summary Cards Module
市場概要・上昇率トップ・下落率トップ・出来高トップのカードを表示します。
"""
from datetime import datetime
from typing import Optional

import streamlit as st

from market_heatmap.models import Stock, Summary
from market_heatmap.ui.formatting import format_percent, format_volume

NOT_AVAILABLE = "N/A"


def _card(title: str, value: str, footer_html: str) -> str:
    return f"""
    <div class="summary-card">
        <div class="summary-title">{title}</div>
        <div class="summary-value">{value}</div>
        {footer_html}
    </div>
    """


def _change_badge(stock: Optional[Stock]) -> str:
    if stock is None:
        return f'<span class="summary-caption">{NOT_AVAILABLE}</span>'
    css = "badge-positive" if stock["percent_change"] >= 0 else "badge-negative"
    return f'<span class="summary-badge {css}">{format_percent(stock["percent_change"])}</span>'


def summary_card_values(summary: Summary) -> dict:
    """カードに表示する値（ティッカー・補足）を組み立てる"""
    gainer, loser, active = summary["top_gainer"], summary["top_loser"], summary["most_active"]
    return {
        "count": f"{summary['count']} Stocks",
        "top_gainer": gainer["ticker"] if gainer else NOT_AVAILABLE,
        "top_loser": loser["ticker"] if loser else NOT_AVAILABLE,
        "most_active": active["ticker"] if active else NOT_AVAILABLE,
        "most_active_volume": f"{format_volume(active['volume'])} shares" if active else NOT_AVAILABLE,
    }


def render_summary_cards(summary: Summary, last_updated: Optional[datetime], loading: bool = False):
    """4枚のサマリーカードを横並びで表示"""
    values = summary_card_values(summary)
    updated = last_updated.strftime("%H:%M:%S") if last_updated else "-"

    cols = st.columns(4)
    cards = [
        _card("📊 Market Overview", "Loading..." if loading else values["count"],
              f'<div class="summary-caption">Last updated: {updated}</div>'),
        _card("📈 Top Gainer", values["top_gainer"], _change_badge(summary["top_gainer"])),
        _card("📉 Top Loser", values["top_loser"], _change_badge(summary["top_loser"])),
        _card("🔥 Most Active", values["most_active"],
              f'<div class="summary-caption">{values["most_active_volume"]}</div>'),
    ]
    for col, html in zip(cols, cards):
        with col:
            st.markdown(html, unsafe_allow_html=True)
