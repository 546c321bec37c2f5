"""
Sidebar UI module
Manages API settings, percent-change validation, theme and manual refresh.
"""
import streamlit as st

from market_heatmap.constants import (
    PERCENT_CHANGE_MODES,
    PERCENT_MODE_RECOMPUTE,
    PERCENT_MODE_TRUST,
    PERCENT_MODE_WARN,
    THEME_DARK,
    THEME_LIGHT,
)
from market_heatmap.dashboard_state import DashboardState
from market_heatmap.polygon_client import is_configured
from market_heatmap.settings_storage import (
    get_percent_change_mode,
    get_saved_polygon_api_key,
    get_theme,
    set_percent_change_mode,
    set_polygon_api_key,
    set_theme,
)

PERCENT_MODE_LABELS = {
    PERCENT_MODE_TRUST: "Trust provider",
    PERCENT_MODE_WARN: "Log mismatches",
    PERCENT_MODE_RECOMPUTE: "Recompute",
}


def render_sidebar(state: DashboardState):
    """Renders the application sidebar."""
    with st.sidebar:
        st.markdown("## 📈 Stock Heatmap")

        # === 表示テーマ ===
        dark = st.toggle("🌙 Dark mode", value=get_theme() == THEME_DARK)
        theme = THEME_DARK if dark else THEME_LIGHT
        if theme != get_theme():
            set_theme(theme)
            st.rerun()

        st.divider()

        if st.button("🔄 Refresh now", use_container_width=True):
            with st.spinner("Refreshing..."):
                state.refresh_market_data()

        if not is_configured():
            st.caption("⚠️ Polygon API key not set. Showing sample data.")

        st.divider()
        _render_settings(state)

        st.divider()
        updated = state.last_updated.strftime("%H:%M:%S") if state.last_updated else "-"
        st.caption(f"📊 Last updated: {updated}")


def _render_settings(state: DashboardState):
    """設定セクション（API設定 + 騰落率検証）"""
    with st.expander("⚙️ Settings", expanded=False):
        st.markdown("**🔑 API**")

        # 比較は保存値と行う（secrets・環境変数のキーは上書きしない）
        saved_api_key = get_saved_polygon_api_key()
        api_key = st.text_input(
            "Polygon API Key",
            type="password",
            value=saved_api_key,
            help="Saved keys take precedence over POLYGON_API_KEY in the environment",
        ).strip()

        if api_key and api_key != saved_api_key:
            if set_polygon_api_key(api_key):
                st.success("✅ API key saved")
                state.refresh_market_data()
            else:
                st.error("❌ Failed to save API key")
        elif is_configured():
            st.caption("✅ Configured")

        st.markdown("---")

        st.markdown("**🧮 Percent change**")
        saved_mode = get_percent_change_mode()
        mode = st.radio(
            "Validation",
            PERCENT_CHANGE_MODES,
            format_func=lambda m: PERCENT_MODE_LABELS[m],
            index=PERCENT_CHANGE_MODES.index(saved_mode),
            help="Cross-check the provider's percent change against price and previous close",
        )
        if mode != saved_mode:
            set_percent_change_mode(mode)
            state.refresh_market_data()
