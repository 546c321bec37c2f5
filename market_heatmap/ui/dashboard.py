"""
Dashboard Module
検索・フィルタ、ヒートマップ／履歴チャートのタブ、サマリーカードを表示します。
データ部分は st.fragment(run_every=...) 内で描画し、60秒ごとに更新します。
"""
import streamlit as st

from market_heatmap.constants import (
    ALL_SECTORS,
    REFRESH_INTERVAL_SECONDS,
    TIMEFRAMES,
)
from market_heatmap.dashboard_state import DashboardState
from market_heatmap.settings_storage import get_theme
from market_heatmap.ui.heatmap import render_heatmap
from market_heatmap.ui.historical_chart import render_history_chart
from market_heatmap.ui.summary_cards import render_summary_cards

STATE_KEY = "dashboard_state"


def get_dashboard_state() -> DashboardState:
    """セッションごとのDashboardStateを取得（無ければ作成）"""
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = DashboardState()
    return st.session_state[STATE_KEY]


def render_dashboard():
    """Renders the dashboard page."""
    state = get_dashboard_state()

    st.markdown('<div class="main-header">📊 Stock Heatmap Dashboard</div>', unsafe_allow_html=True)

    # 初回はフィルタ描画前にセクター一覧を読み込む
    if state.last_attempt is None:
        with st.spinner("Loading stock data..."):
            state.refresh_market_data()

    _render_filters(state)
    _render_live_body()


def _render_filters(state: DashboardState):
    """検索ボックス・セクター・期間の選択"""
    search_col, sector_col, timeframe_col = st.columns([2, 1, 1])

    with search_col:
        state.search_query = st.text_input(
            "Search",
            value=state.search_query,
            placeholder="🔍 Search stocks by ticker or name...",
            label_visibility="collapsed",
        )

    with sector_col:
        sector_options = [ALL_SECTORS] + [s["name"] for s in state.sectors]
        if state.selected_sector not in sector_options:
            sector_options.append(state.selected_sector)
        state.selected_sector = st.selectbox(
            "Sector",
            sector_options,
            index=sector_options.index(state.selected_sector),
            format_func=lambda s: "All Sectors" if s == ALL_SECTORS else s,
            label_visibility="collapsed",
        )

    with timeframe_col:
        timeframe_keys = list(TIMEFRAMES.keys())
        timeframe = st.selectbox(
            "Timeframe",
            timeframe_keys,
            index=timeframe_keys.index(state.selected_timeframe),
            format_func=lambda k: TIMEFRAMES[k]["label"],
            label_visibility="collapsed",
        )
        if timeframe != state.selected_timeframe:
            with st.spinner("Loading historical data..."):
                state.select_timeframe(timeframe)


@st.fragment(run_every=REFRESH_INTERVAL_SECONDS)
def _render_live_body():
    """定期更新されるデータ部分（フラグメント破棄と同時にタイマーも停止）"""
    state = get_dashboard_state()
    theme = get_theme()

    if state.needs_refresh():
        with st.spinner("Loading stock data..."):
            state.refresh_market_data()

    heatmap_tab, history_tab = st.tabs(["🗺️ Heatmap", "📈 Historical Data"])

    with heatmap_tab:
        _render_heatmap_tab(state, theme)

    with history_tab:
        _render_history_tab(state, theme)

    st.divider()
    render_summary_cards(state.summary(), state.last_updated, state.loading)


def _render_error(state: DashboardState, key: str, retry):
    st.error(state.error)
    if st.button("🔄 Retry", key=key):
        with st.spinner("Retrying..."):
            retry()
        st.rerun()


def _render_heatmap_tab(state: DashboardState, theme: str):
    st.markdown("### Market Heatmap")
    st.caption("Tile size reflects trading volume. Green indicates gains, red indicates losses.")

    if state.error:
        _render_error(state, "retry_stocks", state.refresh_market_data)
        return

    filtered = state.filtered_stocks()
    render_heatmap(filtered, theme)

    # ドリルダウン: 選択した銘柄の履歴を「Historical Data」タブで表示
    tickers = [s["ticker"] for s in filtered]
    if state.selected_ticker and state.selected_ticker not in tickers:
        tickers.insert(0, state.selected_ticker)
    options = [None] + tickers
    selected = st.selectbox(
        "Drill down",
        options,
        index=options.index(state.selected_ticker),
        format_func=lambda t: "Select a stock..." if t is None else t,
    )
    if selected != state.selected_ticker:
        with st.spinner("Loading historical data..."):
            state.select_ticker(selected)
    if state.selected_ticker:
        st.caption(f"Open the Historical Data tab to view {state.selected_ticker}.")


def _render_history_tab(state: DashboardState, theme: str):
    st.markdown("### Historical Performance")

    if not state.selected_ticker:
        st.info("Select a stock from the heatmap to view historical data.")
        return

    st.caption(f"Historical data for {state.selected_ticker} over the selected timeframe.")

    if state.error:
        _render_error(state, "retry_history", state.refresh_history)
        return

    if not state.historical:
        with st.spinner("Loading historical data..."):
            state.refresh_history()

    render_history_chart(state.historical, state.selected_ticker, state.selected_timeframe, theme)
