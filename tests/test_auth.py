"""
OAuth install flow, sessions and signature helpers.
"""

import base64
import hashlib
import hmac
from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import requests

from popupmail.core.shopify import normalize_shop_domain
from popupmail.modules.auth.sessions import delete_session, get_session, save_session
from popupmail.modules.auth.utils import verify_hmac, verify_proxy_signature, verify_webhook

from .conftest import API_SECRET, SHOP


def _oauth_params(**params):
    message = "&".join(f"{k}={params[k]}" for k in sorted(params))
    params["hmac"] = hmac.new(API_SECRET.encode(), message.encode(), hashlib.sha256).hexdigest()
    return params


# ---------------------------------------------------------------------------
# Signature helpers
# ---------------------------------------------------------------------------

def test_verify_hmac():
    params = _oauth_params(code="abc", shop=SHOP, state="xyz", timestamp="1700000000")
    assert verify_hmac(params, API_SECRET)

    params["code"] = "tampered"
    assert not verify_hmac(params, API_SECRET)
    assert not verify_hmac({"shop": SHOP}, API_SECRET)
    assert not verify_hmac(_oauth_params(shop=SHOP), None)


def test_verify_proxy_signature_has_no_separator():
    params = {"shop": SHOP, "timestamp": "1"}
    concatenated = f"shop={SHOP}timestamp=1"
    params["signature"] = hmac.new(API_SECRET.encode(), concatenated.encode(), hashlib.sha256).hexdigest()

    assert verify_proxy_signature(params, API_SECRET)
    assert not verify_proxy_signature(params, "wrong-secret")


def test_verify_webhook():
    body = b'{"shop_domain": "test-shop.myshopify.com"}'
    header = base64.b64encode(hmac.new(API_SECRET.encode(), body, hashlib.sha256).digest()).decode()

    assert verify_webhook(body, header, API_SECRET)
    assert not verify_webhook(body + b" ", header, API_SECRET)
    assert not verify_webhook(body, None, API_SECRET)


def test_normalize_shop_domain():
    assert normalize_shop_domain("https://Test-Shop.myshopify.com/") == SHOP
    assert normalize_shop_domain("test-shop.myshopify.com") == SHOP
    assert normalize_shop_domain("evil.com") is None
    assert normalize_shop_domain("shop.myshopify.com.evil.com") is None
    assert normalize_shop_domain("") is None


# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------

def test_session_store(app):
    with app.app_context():
        assert get_session(SHOP) is None
        assert save_session(SHOP, "shpat_one", "read_customers")
        assert save_session(SHOP, "shpat_two", "write_customers")

        stored = get_session(SHOP)
        assert stored["access_token"] == "shpat_two"
        assert stored["scope"] == "write_customers"

        assert delete_session(SHOP) is True
        assert get_session(SHOP) is None
        assert delete_session(SHOP) is False


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

def test_login_page(client):
    response = client.get("/auth/login")
    assert response.status_code == 200
    assert b'name="shop"' in response.data


def test_install_invalid_shop(client):
    assert client.get("/auth/install?shop=example.com").status_code == 400
    assert client.get("/auth/install").status_code == 400


def test_install_redirects_to_shopify(client):
    response = client.get(f"/auth/install?shop={SHOP}")

    assert response.status_code == 302
    location = urlparse(response.headers["Location"])
    assert location.netloc == SHOP
    assert location.path == "/admin/oauth/authorize"

    query = parse_qs(location.query)
    assert query["client_id"] == ["test-api-key"]
    assert query["redirect_uri"] == ["https://popup.example.com/auth/callback"]
    assert "write_customers" in query["scope"][0]

    with client.session_transaction() as sess:
        assert sess["oauth_state"] == query["state"][0]


def _start_install(client):
    with client.session_transaction() as sess:
        sess["oauth_state"] = "state-123"


def test_callback_rejects_bad_hmac(client):
    _start_install(client)
    params = _oauth_params(code="abc", shop=SHOP, state="state-123")
    params["hmac"] = "0" * 64

    assert client.get("/auth/callback", query_string=params).status_code == 401


def test_callback_rejects_state_mismatch(client):
    _start_install(client)
    params = _oauth_params(code="abc", shop=SHOP, state="other-state")

    assert client.get("/auth/callback", query_string=params).status_code == 401


def test_callback_stores_offline_token(app, client):
    _start_install(client)
    params = _oauth_params(code="abc", shop=SHOP, state="state-123", timestamp="1700000000")

    token_response = MagicMock()
    token_response.json.return_value = {"access_token": "shpat_123", "scope": "write_customers"}
    token_response.raise_for_status.return_value = None

    with patch("popupmail.modules.auth.routes.requests.post", return_value=token_response) as mock_post:
        response = client.get("/auth/callback", query_string=params)

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/app/")

    args, kwargs = mock_post.call_args
    assert args[0] == f"https://{SHOP}/admin/oauth/access_token"
    assert kwargs["json"] == {"client_id": "test-api-key", "client_secret": API_SECRET, "code": "abc"}

    with client.session_transaction() as sess:
        assert sess["shop"] == SHOP
        assert "oauth_state" not in sess

    with app.app_context():
        assert get_session(SHOP)["access_token"] == "shpat_123"


def test_callback_token_exchange_failure(client):
    _start_install(client)
    params = _oauth_params(code="abc", shop=SHOP, state="state-123")

    with patch("popupmail.modules.auth.routes.requests.post",
               side_effect=requests.ConnectionError("connection refused")):
        response = client.get("/auth/callback", query_string=params)

    assert response.status_code == 502


def test_logout(admin_client):
    response = admin_client.get("/auth/logout")

    assert response.status_code == 302
    with admin_client.session_transaction() as sess:
        assert "shop" not in sess
