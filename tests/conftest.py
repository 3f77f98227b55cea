"""
Shared fixtures for the Popup Mail test suite.

Run with: pytest tests/ -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from popupmail import PopupMail

SHOP = "test-shop.myshopify.com"
OTHER_SHOP = "other-shop.myshopify.com"
API_SECRET = "test-api-secret"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="popupmail-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


def make_app(db_dir, **overrides):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["APP_DB"] = os.path.join(db_dir, "popupmail.db")
    app.config["LOG_DB"] = os.path.join(db_dir, "app_logs.db")
    app.config["SHOPIFY_API_KEY"] = "test-api-key"
    app.config["SHOPIFY_API_SECRET"] = API_SECRET
    app.config["APP_URL"] = "https://popup.example.com"
    app.config["ENVIRONMENT"] = "test"
    app.config.update(overrides)
    PopupMail(app)
    return app


@pytest.fixture
def app(tmp_db_dir):
    """Fully initialised Flask app with every Popup Mail module registered."""
    return make_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    """Test client logged in as the merchant of SHOP."""
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["shop"] = SHOP
    return client


@pytest.fixture
def make_campaign(app):
    """Factory storing a campaign built from the editor defaults."""
    from popupmail.modules.campaigns.forms import parse_campaign_form
    from popupmail.modules.campaigns.models import create_campaign

    def _make(shop=SHOP, **fields):
        form = {"title": "Summer Sale", "status": "ACTIVE"}
        form.update({k: v for k, v in fields.items()})
        with app.app_context():
            data = parse_campaign_form(form, shop)
            return create_campaign(data)

    return _make
