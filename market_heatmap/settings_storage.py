"""
Settings Storage Module
APIキーや表示設定をローカルに永続化します。
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from market_heatmap.constants import (
    PERCENT_CHANGE_MODES,
    PERCENT_MODE_TRUST,
    THEME_DARK,
    THEME_LIGHT,
)
from market_heatmap.log_config import get_logger

logger = get_logger(__name__)

load_dotenv()


# 設定ファイルのパス（プロジェクト内のdataディレクトリ）
SETTINGS_DIR = Path(__file__).parent.parent / "data"
SETTINGS_FILE = SETTINGS_DIR / "settings.json"

# メモリキャッシュ（ファイルI/O削減用）
_settings_cache: Optional[dict] = None


def _ensure_dir():
    """設定ディレクトリを作成"""
    SETTINGS_DIR.mkdir(exist_ok=True)


def load_settings(force_reload: bool = False) -> dict:
    """
    保存された設定を読み込みます。
    キャッシュがある場合はファイルI/Oをスキップします。

    Args:
        force_reload: Trueの場合キャッシュを無視して再読み込み
    """
    global _settings_cache

    if _settings_cache is not None and not force_reload:
        return _settings_cache.copy()

    data = {}
    try:
        if SETTINGS_FILE.exists():
            with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"設定読み込みエラー: {e}")

    _settings_cache = data
    return _settings_cache.copy()


def save_settings(settings: dict) -> bool:
    """
    設定を保存します。保存後はキャッシュを更新します。
    """
    global _settings_cache
    try:
        _ensure_dir()
        with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2, ensure_ascii=False)
        _settings_cache = settings.copy()
        return True
    except OSError as e:
        logger.error(f"設定保存エラー: {e}")
        _settings_cache = None
        return False


def get_setting(key: str, default=None):
    """
    特定の設定値を取得します。

    Args:
        key: 設定キー
        default: デフォルト値

    Returns:
        設定値
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value) -> bool:
    """
    特定の設定値を保存します。

    Args:
        key: 設定キー
        value: 設定値

    Returns:
        成功時True
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


# === 便利関数 ===


def get_saved_polygon_api_key() -> str:
    """サイドバーから保存されたPolygon APIキー（未保存なら空文字）"""
    return get_setting("polygon_api_key", "")


def get_polygon_api_key() -> str:
    """Polygon APIキーを取得（Streamlit secrets → ローカル設定 → 環境変数）"""
    # 1. Streamlit secretsから取得
    try:
        import streamlit as st

        if "POLYGON_API_KEY" in st.secrets:
            return st.secrets["POLYGON_API_KEY"]
    except Exception:
        # secrets.tomlが無い場合はStreamlitが例外を送出する
        pass
    # 2. サイドバーで保存したキー
    saved = get_saved_polygon_api_key()
    if saved:
        return saved
    # 3. 環境変数 (.env含む)
    return os.environ.get("POLYGON_API_KEY", "")


def set_polygon_api_key(api_key: str) -> bool:
    """Polygon APIキーを保存"""
    return set_setting("polygon_api_key", api_key.strip())


def get_percent_change_mode() -> str:
    """騰落率の検証モードを取得（trust/warn/recompute）"""
    mode = get_setting("percent_change_mode", PERCENT_MODE_TRUST)
    if mode not in PERCENT_CHANGE_MODES:
        logger.warning(f"[CONFIG_WARN] Unknown percent_change_mode '{mode}', using '{PERCENT_MODE_TRUST}'")
        return PERCENT_MODE_TRUST
    return mode


def set_percent_change_mode(mode: str) -> bool:
    """騰落率の検証モードを保存"""
    if mode not in PERCENT_CHANGE_MODES:
        raise ValueError(f"Invalid percent_change_mode: {mode}")
    return set_setting("percent_change_mode", mode)


def get_theme() -> str:
    """表示テーマを取得（light/dark）"""
    theme = get_setting("theme", THEME_LIGHT)
    return theme if theme in (THEME_LIGHT, THEME_DARK) else THEME_LIGHT


def set_theme(theme: str) -> bool:
    """表示テーマを保存"""
    return set_setting("theme", theme)
