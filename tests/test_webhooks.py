"""
Shopify lifecycle and privacy webhooks.
"""

import base64
import hashlib
import hmac
import json

from popupmail.modules.auth.sessions import get_session, save_session
from popupmail.modules.campaigns.models import get_campaigns
from popupmail.modules.subscribers.models import add_subscriber, get_subscribers

from .conftest import API_SECRET, OTHER_SHOP, SHOP


def _post(client, topic, payload, shop=SHOP, secret=API_SECRET):
    body = json.dumps(payload).encode()
    signature = base64.b64encode(hmac.new(secret.encode(), body, hashlib.sha256).digest()).decode()
    return client.post(
        f"/webhooks/{topic}",
        data=body,
        content_type="application/json",
        headers={
            "X-Shopify-Hmac-Sha256": signature,
            "X-Shopify-Shop-Domain": shop,
            "X-Shopify-Topic": topic,
        },
    )


def test_rejects_bad_signature(client):
    response = _post(client, "app/uninstalled", {"domain": SHOP}, secret="not-the-secret")
    assert response.status_code == 401


def test_app_uninstalled_drops_session(app, client):
    with app.app_context():
        save_session(SHOP, "shpat_123")

    response = _post(client, "app/uninstalled", {"domain": SHOP})

    assert response.status_code == 200
    with app.app_context():
        assert get_session(SHOP) is None


def test_customers_redact(app, client, make_campaign):
    campaign_id = make_campaign()
    with app.app_context():
        add_subscriber(SHOP, campaign_id, "jane@example.com")
        add_subscriber(SHOP, campaign_id, "john@example.com")
        add_subscriber(OTHER_SHOP, campaign_id, "jane@example.com")

    response = _post(client, "customers/redact", {
        "shop_domain": SHOP,
        "customer": {"id": 1, "email": "Jane@Example.com"},
        "orders_to_redact": [],
    })

    assert response.status_code == 200
    with app.app_context():
        assert [s["email"] for s in get_subscribers(SHOP)] == ["john@example.com"]
        assert len(get_subscribers(OTHER_SHOP)) == 1


def test_shop_redact_removes_everything(app, client, make_campaign):
    campaign_id = make_campaign()
    other_campaign = make_campaign(shop=OTHER_SHOP)
    with app.app_context():
        save_session(SHOP, "shpat_123")
        add_subscriber(SHOP, campaign_id, "jane@example.com")
        add_subscriber(OTHER_SHOP, other_campaign, "jane@example.com")

    response = _post(client, "shop/redact", {"shop_id": 1, "shop_domain": SHOP})

    assert response.status_code == 200
    with app.app_context():
        assert get_campaigns(SHOP) == []
        assert get_subscribers(SHOP) == []
        assert get_session(SHOP) is None
        assert len(get_campaigns(OTHER_SHOP)) == 1
        assert len(get_subscribers(OTHER_SHOP)) == 1


def test_customers_data_request_acknowledged(client):
    response = _post(client, "customers/data_request", {
        "shop_domain": SHOP,
        "customer": {"id": 1, "email": "jane@example.com"},
        "data_request": {"id": 9},
    })
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_unknown_topic_ignored(client):
    response = _post(client, "orders/create", {"id": 1})
    assert response.status_code == 200
    assert response.get_json() == {"status": "ignored"}
