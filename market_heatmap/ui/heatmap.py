"""
Heatmap Module
銘柄をセクター別ツリーマップで表示します（面積 = √出来高、色 = 騰落率）。
"""
from collections import OrderedDict
from typing import List, Optional

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from market_heatmap.constants import THEME_LIGHT
from market_heatmap.models import Stock
from market_heatmap.ui.formatting import (
    format_market_cap,
    format_percent,
    format_price,
    format_volume,
)
from market_heatmap.ui.styles import plotly_template

ROOT_ID = "Market"

# 騰落率 -> 色（範囲外はクランプ）
COLOR_STOPS = [
    (-5.0, "#b91c1c", "< -5%"),
    (-2.0, "#ef4444", "-2%"),
    (-0.5, "#fca5a5", "-0.5%"),
    (0.0, "#9ca3af", "0%"),
    (0.5, "#86efac", "+0.5%"),
    (2.0, "#22c55e", "+2%"),
    (5.0, "#15803d", "> +5%"),
]
COLOR_MIN = COLOR_STOPS[0][0]
COLOR_MAX = COLOR_STOPS[-1][0]


def percent_change_colorscale() -> list:
    """plotly用の連続カラースケール（0〜1に正規化）"""
    span = COLOR_MAX - COLOR_MIN
    return [[(value - COLOR_MIN) / span, color] for value, color, _ in COLOR_STOPS]


def clamp_change(value: float) -> float:
    """騰落率をカラースケールの範囲 [COLOR_MIN, COLOR_MAX] に収める"""
    return float(np.clip(value, COLOR_MIN, COLOR_MAX))


def _stock_hover(stock: Stock) -> str:
    return (
        f"<b>{stock['ticker']}</b> {stock['name']}<br>"
        f"Change: {format_percent(stock['percent_change'])}<br>"
        f"Price: {format_price(stock['price'])}<br>"
        f"Prev Close: {format_price(stock['previous_close'])}<br>"
        f"Volume: {format_volume(stock['volume'])}<br>"
        f"Market Cap: {format_market_cap(stock['market_cap'])}"
    )


def build_heatmap_figure(stocks: List[Stock], theme: str = THEME_LIGHT) -> Optional[go.Figure]:
    """
    Market -> セクター -> 銘柄 の階層ツリーマップを作成。

    Args:
        stocks: 表示対象の銘柄（フィルタ済み）
        theme: light / dark

    Returns:
        plotly Figure。銘柄が無い場合はNone
    """
    if not stocks:
        return None

    groups: "OrderedDict[str, List[Stock]]" = OrderedDict()
    for stock in stocks:
        groups.setdefault(stock["sector"], []).append(stock)

    ids, labels, parents, values, colors, texts, hovers = [ROOT_ID], [ROOT_ID], [""], [0.0], [0.0], [""], [ROOT_ID]

    for sector, members in groups.items():
        weights = np.sqrt([max(s["volume"], 0) for s in members])
        changes = np.array([s["percent_change"] for s in members])
        # セクターの色は√出来高加重平均
        sector_change = float(np.average(changes, weights=weights)) if weights.sum() > 0 else float(changes.mean())

        sector_id = f"sector/{sector}"
        ids.append(sector_id)
        labels.append(sector)
        parents.append(ROOT_ID)
        values.append(0.0)
        colors.append(clamp_change(sector_change))
        texts.append("")
        hovers.append(f"<b>{sector}</b><br>{len(members)} stocks<br>Avg: {format_percent(sector_change)}")

        for stock, weight in zip(members, weights):
            ids.append(f"stock/{stock['ticker']}")
            labels.append(stock["ticker"])
            parents.append(sector_id)
            values.append(float(weight))
            colors.append(clamp_change(stock["percent_change"]))
            texts.append(format_percent(stock["percent_change"]))
            hovers.append(_stock_hover(stock))

    fig = go.Figure(go.Treemap(
        ids=ids,
        labels=labels,
        parents=parents,
        values=values,
        branchvalues="remainder",
        text=texts,
        texttemplate="<b>%{label}</b><br>%{text}",
        hovertext=hovers,
        hoverinfo="text",
        marker=dict(
            colors=colors,
            colorscale=percent_change_colorscale(),
            cmin=COLOR_MIN,
            cmax=COLOR_MAX,
            line=dict(width=1),
        ),
        tiling=dict(pad=2),
        pathbar=dict(visible=True),
    ))
    fig.update_layout(
        template=plotly_template(theme),
        height=600,
        margin=dict(l=0, r=0, t=30, b=0),
    )
    return fig


def render_legend():
    """騰落率の凡例を表示"""
    items = "".join(
        f'<div class="performance-legend-item">'
        f'<div class="performance-legend-color" style="background-color: {color};"></div>'
        f"<span>{label}</span></div>"
        for _, color, label in COLOR_STOPS
    )
    st.markdown(f'<div class="performance-legend">{items}</div>', unsafe_allow_html=True)


def render_heatmap(stocks: List[Stock], theme: str = THEME_LIGHT):
    """ヒートマップを描画"""
    fig = build_heatmap_figure(stocks, theme)
    if fig is None:
        st.info("No stocks match the current filters.")
        return
    st.plotly_chart(fig, use_container_width=True, theme=None)
    render_legend()
