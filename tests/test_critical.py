"""
Critical Integration Tests for Popup Mail
=========================================

Focused tests covering the integration points most likely to break.
Run with: pytest tests/test_critical.py -v
"""

import os
import shutil
import sqlite3
import tempfile

from flask import Flask

from popupmail import PopupMail

from .conftest import SHOP, OTHER_SHOP, make_app


# ---------------------------------------------------------------------------
# 1. Extension initialisation -- PopupMail(app) does not raise
# ---------------------------------------------------------------------------

def test_extension_initialisation(tmp_db_dir):
    """PopupMail(app) boots without errors and stores itself on the app."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir
    app.config["APP_DB"] = os.path.join(tmp_db_dir, "popupmail.db")
    app.config["LOG_DB"] = os.path.join(tmp_db_dir, "app_logs.db")

    popupmail = PopupMail(app)

    assert "popupmail" in app.extensions
    assert app.extensions["popupmail"] is popupmail
    assert app.config["SECRET_KEY"], "SECRET_KEY should fall back to the core default"


def test_init_app_factory_pattern(tmp_db_dir):
    """PopupMail() followed by init_app(app, config) works like the constructor."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir

    popupmail = PopupMail()
    popupmail.init_app(app, {"brand_name": "Acme Popups"})

    assert app.extensions["popupmail"] is popupmail
    assert popupmail.config["brand_name"] == "Acme Popups"
    assert app.config["APP_DB"] == os.path.join(tmp_db_dir, "popupmail.db")
    assert app.config["LOG_DB"] == os.path.join(tmp_db_dir, "app_logs.db")


# ---------------------------------------------------------------------------
# 2. Database directory and tables are created at init
# ---------------------------------------------------------------------------

def test_database_dir_creation():
    """init creates the configured DB_DIR on disk."""
    d = tempfile.mkdtemp(prefix="popupmail-dbtest-")
    target = os.path.join(d, "sub", "databases")

    try:
        make_app(target)
        assert os.path.isdir(target), f"DB_DIR was not created at {target}"
    finally:
        shutil.rmtree(d, ignore_errors=True)


def test_tables_created(app):
    conn = sqlite3.connect(app.config["APP_DB"])
    try:
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
    finally:
        conn.close()

    assert {"shop_sessions", "campaigns", "subscribers"} <= names


# ---------------------------------------------------------------------------
# 3. Blueprint registration
# ---------------------------------------------------------------------------

EXPECTED_MODULES = [
    "auth",
    "campaigns",
    "storefront",
    "subscribers",
    "uploads",
    "webhooks",
    "ops",
]


def test_all_blueprints_registered(app):
    """All feature modules should be registered as blueprints."""
    registered = app.extensions["popupmail"].get_registered_modules()

    for mod in EXPECTED_MODULES:
        assert mod in registered, (
            f"Module '{mod}' was not registered. Registered: {registered}"
        )

    assert len(registered) == len(EXPECTED_MODULES)


def test_feature_can_be_disabled(tmp_db_dir):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["DB_DIR"] = tmp_db_dir

    popupmail = PopupMail(app, {"features": {"uploads": False}})

    assert "uploads" not in popupmail.get_registered_modules()
    rules = [rule.rule for rule in app.url_map.iter_rules()]
    assert "/app/upload" not in rules
    assert "/api/subscribe" in rules


def test_public_routes_registered(app):
    rules = [rule.rule for rule in app.url_map.iter_rules()]
    for expected in ("/api/campaign", "/api/subscribe", "/proxy/api/campaign",
                     "/proxy/api/subscribe", "/app/", "/app/subscribers/export",
                     "/app/upload", "/webhooks/<path:topic>", "/auth/install"):
        assert expected in rules, f"{expected} not found. Routes: {sorted(rules)}"


# ---------------------------------------------------------------------------
# 4. Template context -- popupmail_config and brand_name are injected
# ---------------------------------------------------------------------------

def test_template_context_injection(app):
    with app.test_request_context("/"):
        ctx = {}
        for func in app.template_context_processors[None]:
            ctx.update(func())

        assert isinstance(ctx["popupmail_config"], dict)
        assert ctx["brand_name"] == "Popup Mail"


# ---------------------------------------------------------------------------
# 5. Admin auth guard
# ---------------------------------------------------------------------------

def test_admin_auth_redirect(client):
    """Unauthenticated GET to the dashboard redirects to login."""
    response = client.get("/app/", follow_redirects=False)
    assert response.status_code == 302
    assert "/auth/login" in response.headers.get("Location", "")


def test_admin_auth_redirect_with_shop_starts_install(client):
    response = client.get("/app/?shop=test-shop.myshopify.com", follow_redirects=False)
    assert response.status_code == 302
    assert "/auth/install?shop=test-shop.myshopify.com" in response.headers["Location"]


def test_root_redirects_to_dashboard(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/app/")


# ---------------------------------------------------------------------------
# 6. Health endpoint
# ---------------------------------------------------------------------------

def test_health_endpoint(client):
    """GET /health returns JSON with status field and checks dict."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["checks"]["database"]["ok"] is True


def test_health_endpoint_database_down(client):
    from unittest.mock import patch

    with patch("popupmail.modules.ops.routes.Database.ping", return_value=(False, "disk I/O error")):
        response = client.get("/health")

    assert response.status_code == 503
    data = response.get_json()
    assert data["status"] == "critical"
    assert data["checks"]["database"] == {"ok": False, "error": "disk I/O error"}


def test_error_feed_requires_login(client):
    response = client.get("/health/errors")
    assert response.status_code == 302


def test_error_feed_lists_shop_errors(app, admin_client):
    from popupmail.core import LoggingService

    with app.app_context():
        LoggingService.info("campaigns", "Campaign saved", shop=SHOP)
        LoggingService.error("storefront", "Database error loading campaign config", shop=SHOP)
        LoggingService.error("storefront", "Database error", shop=OTHER_SHOP)

    response = admin_client.get("/health/errors")
    assert response.status_code == 200
    data = response.get_json()
    assert data["count"] == 1
    assert data["errors"][0]["message"] == "Database error loading campaign config"
    assert data["errors"][0]["shop"] == SHOP
