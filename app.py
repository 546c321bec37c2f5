"""
Stock Heatmap Dashboard - メインアプリケーション
Streamlitを使用したダッシュボードUI
"""
import streamlit as st

from market_heatmap.log_config import get_logger
from market_heatmap.settings_storage import get_theme
from market_heatmap.ui.dashboard import get_dashboard_state, render_dashboard
from market_heatmap.ui.sidebar import render_sidebar
from market_heatmap.ui.styles import get_custom_css

logger = get_logger(__name__)

# ページ設定
st.set_page_config(
    page_title="Stock Heatmap Dashboard",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded"
)


def render_error_screen(e):
    """起動エラー時のフォールバック画面を表示"""
    st.error("An error occurred while starting the dashboard.")
    st.code(str(e), language="python")
    st.markdown("""
    ### What to try
    1. Reload the page.
    2. Check the Polygon API key in the sidebar settings.
    3. Try again in a few minutes.
    """)


def main():
    """メイン関数"""
    try:
        state = get_dashboard_state()

        # スタイルの適用
        st.markdown(get_custom_css(get_theme()), unsafe_allow_html=True)

        render_sidebar(state)
        render_dashboard()

    except Exception as e:
        logger.exception(f"Dashboard error: {e}")
        render_error_screen(e)


if __name__ == "__main__":
    main()
