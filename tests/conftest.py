import json
from unittest.mock import patch

import pytest
import requests


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings storage at a temp dir and drop any ambient API key."""
    from market_heatmap import settings_storage

    monkeypatch.setattr(settings_storage, "SETTINGS_DIR", tmp_path)
    monkeypatch.setattr(settings_storage, "SETTINGS_FILE", tmp_path / "settings.json")
    monkeypatch.setattr(settings_storage, "_settings_cache", None)
    monkeypatch.delenv("POLYGON_API_KEY", raising=False)
    yield tmp_path


@pytest.fixture(autouse=True)
def mock_session():
    """Mock the shared HTTP session so no test reaches the network."""
    with patch("market_heatmap.network.get_session") as mock_get:
        mock_get.return_value.get.side_effect = AssertionError("unexpected network call")
        yield mock_get.return_value


@pytest.fixture
def api_key():
    """Configure a Polygon API key for the client."""
    with patch("market_heatmap.polygon_client._get_api_key", return_value="test-key"):
        yield "test-key"


@pytest.fixture
def make_response():
    """Build real requests.Response objects so raise_for_status behaves as in production."""

    def _make(status: int, payload=None, url: str = "https://api.polygon.io/test") -> requests.Response:
        response = requests.Response()
        response.status_code = status
        response._content = json.dumps(payload if payload is not None else {}).encode()
        response.url = url
        return response

    return _make
