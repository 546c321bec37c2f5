import pandas as pd
import plotly.graph_objects as go
import streamlit as st
from plotly.subplots import make_subplots
from typing import List, Optional, Tuple

from market_heatmap.constants import THEME_LIGHT, TIMEFRAMES
from market_heatmap.models import HistoricalPoint
from market_heatmap.ui.formatting import format_price
from market_heatmap.ui.styles import plotly_template

UP_COLOR = "#22c55e"
DOWN_COLOR = "#ef4444"


def history_change(points: List[HistoricalPoint]) -> Optional[Tuple[float, float]]:
    """
    期間の先頭→末尾の終値変化を返す。

    Returns:
        (change, change_pct)。データが無い場合はNone
    """
    if not points:
        return None
    first = points[0]["close"]
    last = points[-1]["close"]
    change = last - first
    change_pct = (change / first * 100) if first else 0.0
    return change, change_pct


def history_to_frame(points: List[HistoricalPoint]) -> pd.DataFrame:
    """履歴をDataFrameに変換（時間足はtimestamp、日足はdateをインデックスに使用）"""
    df = pd.DataFrame(points)
    intraday = "timestamp" in df.columns
    x = df["timestamp"].fillna(df["date"]) if intraday else df["date"]
    df.index = pd.to_datetime(x, utc=intraday, format="ISO8601")
    df.index.name = "Date"
    return df


def build_history_figure(
    points: List[HistoricalPoint],
    ticker: str,
    timeframe: str,
    theme: str = THEME_LIGHT,
) -> Optional[go.Figure]:
    """
    終値ラインと出来高バーの2段チャートを作成します。
    上昇トレンド（末尾終値 >= 先頭終値）は緑、下落は赤。
    """
    if not points:
        return None

    df = history_to_frame(points)
    change, _ = history_change(points)
    color = UP_COLOR if change >= 0 else DOWN_COLOR

    fig = make_subplots(
        rows=2, cols=1,
        shared_xaxes=True,
        vertical_spacing=0.05,
        row_heights=[0.7, 0.3],
    )

    # 1. 終値 (Row 1)
    fig.add_trace(go.Scatter(
        x=df.index,
        y=df["close"],
        name=ticker,
        mode="lines",
        line=dict(color=color, width=2),
        customdata=df[["open", "high", "low", "volume"]].values,
        hovertemplate=(
            "%{x}<br>Close: $%{y:,.2f}<br>Open: $%{customdata[0]:,.2f}"
            "<br>High: $%{customdata[1]:,.2f}<br>Low: $%{customdata[2]:,.2f}"
            "<br>Volume: %{customdata[3]:,}<extra></extra>"
        ),
        showlegend=False,
    ), row=1, col=1)

    # 2. 出来高 (Row 2) - ローソク足の陽線/陰線に合わせて色分け
    bar_colors = [UP_COLOR if c >= o else DOWN_COLOR for c, o in zip(df["close"], df["open"])]
    fig.add_trace(go.Bar(
        x=df.index,
        y=df["volume"],
        name="Volume",
        marker_color=bar_colors,
        showlegend=False,
    ), row=2, col=1)

    y_min = df["low"].min() * 0.99
    y_max = df["high"].max() * 1.01
    label = TIMEFRAMES.get(timeframe, {}).get("label", timeframe)

    fig.update_layout(
        title=f"{ticker} · {label}",
        template=plotly_template(theme),
        height=500,
        margin=dict(l=0, r=0, t=40, b=0),
        dragmode="zoom",
        hovermode="x unified",
        yaxis=dict(title="Price ($)", range=[y_min, y_max]),
        yaxis2=dict(title="Volume"),
    )
    # 下段のレンジスライダーでズーム・パン
    fig.update_xaxes(rangeslider=dict(visible=True, thickness=0.05), row=2, col=1)
    return fig


def render_history_chart(points: List[HistoricalPoint], ticker: str, timeframe: str, theme: str = THEME_LIGHT):
    """履歴チャートと期間騰落を描画"""
    fig = build_history_figure(points, ticker, timeframe, theme)
    if fig is None:
        st.error("Historical data is not available.")
        return

    change, change_pct = history_change(points)
    col1, col2, col3 = st.columns(3)
    col1.metric("Last Close", format_price(points[-1]["close"]), f"{change:+,.2f} ({change_pct:+.2f}%)")
    col2.metric("Period High", format_price(max(p["high"] for p in points)))
    col3.metric("Period Low", format_price(min(p["low"] for p in points)))

    st.plotly_chart(fig, use_container_width=True, theme=None)
