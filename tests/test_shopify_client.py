"""
Admin GraphQL client.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from popupmail.core.shopify import ShopifyAdminClient, ShopifyAPIError, ShopifyAuthError
from popupmail.modules.auth.sessions import save_session

from .conftest import SHOP


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = "error body"
    response.json.return_value = payload or {}
    return response


def test_graphql_posts_with_token():
    client = ShopifyAdminClient(SHOP, "shpat_123", api_version="2024-10")

    with patch("popupmail.core.shopify.requests.post",
               return_value=_response(payload={"data": {"shop": {"name": "Test"}}})) as mock_post:
        data = client.graphql("{ shop { name } }", {"a": 1})

    assert data == {"shop": {"name": "Test"}}
    args, kwargs = mock_post.call_args
    assert args[0] == f"https://{SHOP}/admin/api/2024-10/graphql.json"
    assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_123"
    assert kwargs["json"] == {"query": "{ shop { name } }", "variables": {"a": 1}}
    assert kwargs["timeout"] == 30


def test_graphql_errors_raise():
    client = ShopifyAdminClient(SHOP, "shpat_123", api_version="2024-10")

    with patch("popupmail.core.shopify.requests.post",
               return_value=_response(payload={"errors": [{"message": "Throttled"}]})):
        with pytest.raises(ShopifyAPIError) as exc:
            client.graphql("{ shop { name } }")

    assert exc.value.errors == [{"message": "Throttled"}]


def test_http_errors_raise():
    client = ShopifyAdminClient(SHOP, "shpat_123", api_version="2024-10")

    with patch("popupmail.core.shopify.requests.post", return_value=_response(401)):
        with pytest.raises(ShopifyAuthError):
            client.graphql("{ shop { name } }")

    with patch("popupmail.core.shopify.requests.post", return_value=_response(500)):
        with pytest.raises(ShopifyAPIError) as exc:
            client.graphql("{ shop { name } }")
    assert exc.value.status_code == 500

    with patch("popupmail.core.shopify.requests.post", side_effect=requests.Timeout("timed out")):
        with pytest.raises(ShopifyAPIError):
            client.graphql("{ shop { name } }")


def test_for_shop_uses_stored_session(app):
    with app.app_context():
        with pytest.raises(ShopifyAuthError):
            ShopifyAdminClient.for_shop(SHOP)

        save_session(SHOP, "shpat_stored")
        client = ShopifyAdminClient.for_shop(SHOP)

    assert client.access_token == "shpat_stored"
    assert client.shop == SHOP
