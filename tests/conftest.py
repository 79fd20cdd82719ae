"""Shared fixtures for catalog seeder tests."""

from unittest.mock import MagicMock

import pytest

from catalog_seeder.models import SiteConfig, StoreContext


def mock_response(status=200, json_data=None, headers=None, reason="OK", text=""):
    """Build a MagicMock that looks enough like a requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = reason
    resp.text = text
    resp.headers = headers or {}
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    return resp


@pytest.fixture
def site_config():
    return SiteConfig(
        org="acme",
        site="shop",
        ref="main",
        helix_api_key="helix-key",
        conf_map={
            "base": {"storeCode": "main", "storeViewCode": "default"},
            "/us/p/{{urlkey}}": {"storeCode": "main", "storeViewCode": "default", "pageType": "product"},
            "/products/{{sku}}": {"storeCode": "main", "storeViewCode": "default", "pageType": "product"},
            "/fr/p/{{urlkey}}": {"storeCode": "main", "storeViewCode": "fr", "pageType": "product"},
        },
    )


@pytest.fixture
def store_context():
    return StoreContext(store_code="main", store_view_code="default")
