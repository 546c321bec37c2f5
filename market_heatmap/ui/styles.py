"""
UI Styles module
Defines custom CSS for the Streamlit app.
Flat design, light and dark palettes sharing the same class names.
"""
from market_heatmap.constants import THEME_DARK

_PALETTES = {
    "light": {
        "bg_primary": "#ffffff",
        "bg_secondary": "#f8f9fa",
        "text_primary": "#212529",
        "text_muted": "#6c757d",
        "border": "#dee2e6",
    },
    "dark": {
        "bg_primary": "#0e1117",
        "bg_secondary": "#1c1f26",
        "text_primary": "#f1f5f9",
        "text_muted": "#94a3b8",
        "border": "#334155",
    },
}


def plotly_template(theme: str) -> str:
    """テーマに対応するplotlyテンプレート名"""
    return "plotly_dark" if theme == THEME_DARK else "plotly_white"


def get_custom_css(theme: str = "light") -> str:
    """Returns the custom CSS for the application."""
    p = _PALETTES.get(theme, _PALETTES["light"])
    return f"""
<style>
    /* ========================================
       Color Tokens
       ======================================== */
    :root {{
        --color-bg-primary: {p["bg_primary"]};
        --color-bg-secondary: {p["bg_secondary"]};
        --color-text-primary: {p["text_primary"]};
        --color-text-muted: {p["text_muted"]};
        --color-border: {p["border"]};
        --color-positive: #10b981;
        --color-negative: #ef4444;
        --radius-md: 8px;
        --shadow-sm: 0 1px 2px rgba(0,0,0,0.05);
    }}

    .stApp {{
        background-color: var(--color-bg-primary);
        color: var(--color-text-primary);
    }}

    .main-header {{
        font-size: 1.75rem;
        font-weight: 600;
        color: var(--color-text-primary);
        margin-bottom: 1rem;
        letter-spacing: -0.02em;
    }}

    /* ========================================
       Summary Cards
       ======================================== */
    .summary-card {{
        background-color: var(--color-bg-secondary);
        border: 1px solid var(--color-border);
        border-radius: var(--radius-md);
        padding: 0.75rem 1rem;
        height: 100%;
        box-shadow: var(--shadow-sm);
    }}

    .summary-title {{
        font-size: 0.85rem;
        font-weight: 600;
        color: var(--color-text-muted);
        margin-bottom: 0.4rem;
    }}

    .summary-value {{
        font-size: 1.5rem;
        font-weight: 700;
        color: var(--color-text-primary);
        font-variant-numeric: tabular-nums;
    }}

    .summary-badge {{
        display: inline-block;
        font-size: 0.75rem;
        font-weight: 600;
        padding: 2px 8px;
        border-radius: 999px;
    }}

    .badge-positive {{ background-color: #d1fae5; color: #065f46; }}
    .badge-negative {{ background-color: #fee2e2; color: #991b1b; }}
    .summary-caption {{ font-size: 0.75rem; color: var(--color-text-muted); }}

    /* ========================================
       Heatmap Legend
       ======================================== */
    .performance-legend {{
        display: flex;
        gap: 0.75rem;
        flex-wrap: wrap;
        font-size: 0.75rem;
        color: var(--color-text-muted);
    }}

    .performance-legend-item {{
        display: flex;
        align-items: center;
        gap: 0.3rem;
    }}

    .performance-legend-color {{
        width: 14px;
        height: 14px;
        border-radius: 3px;
    }}
</style>
"""
