import logging
from flask import jsonify, request

from popupmail.core.database import get_config_value
from popupmail.modules.auth.sessions import delete_session
from popupmail.modules.auth.utils import verify_webhook
from popupmail.modules.campaigns.models import delete_shop_campaigns
from popupmail.modules.subscribers.models import delete_customer_subscribers, delete_shop_subscribers
from . import webhooks_bp

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'webhooks', message, details, shop)
    except Exception:
        pass


def handle_app_uninstalled(shop, payload):
    delete_session(shop)
    _db_log('info', 'App uninstalled, session removed', shop=shop)


def handle_customers_data_request(shop, payload):
    customer = payload.get('customer') or {}
    # Nothing beyond the subscriber rows is stored; the merchant exports them from the admin
    _db_log('info', 'Customer data request received', {
        'customer_id': customer.get('id'),
        'email': customer.get('email'),
    }, shop)


def handle_customers_redact(shop, payload):
    email = ((payload.get('customer') or {}).get('email') or '').strip().lower()
    if not email:
        logger.warning(f"customers/redact for {shop} without an email")
        return
    deleted = delete_customer_subscribers(shop, email)
    _db_log('info', 'Customer redacted', {'rows_deleted': deleted}, shop)


def handle_shop_redact(shop, payload):
    subscribers = delete_shop_subscribers(shop)
    campaigns = delete_shop_campaigns(shop)
    delete_session(shop)
    _db_log('info', 'Shop redacted', {'subscribers': subscribers, 'campaigns': campaigns}, shop)


WEBHOOK_HANDLERS = {
    'app/uninstalled': handle_app_uninstalled,
    'customers/data_request': handle_customers_data_request,
    'customers/redact': handle_customers_redact,
    'shop/redact': handle_shop_redact,
}


@webhooks_bp.route('/<path:topic>', methods=['POST'])
def receive(topic):
    """Verify and dispatch a Shopify webhook"""
    body = request.get_data()
    if not verify_webhook(body, request.headers.get('X-Shopify-Hmac-Sha256'),
                          get_config_value('SHOPIFY_API_SECRET')):
        logger.warning(f"Invalid webhook signature for topic {topic}")
        return jsonify({'error': 'Invalid webhook signature'}), 401

    payload = request.get_json(silent=True) or {}
    shop = (request.headers.get('X-Shopify-Shop-Domain') or payload.get('shop_domain') or '').strip().lower()

    handler = WEBHOOK_HANDLERS.get(topic)
    if not handler:
        logger.info(f"Ignoring webhook topic {topic}")
        return jsonify({'status': 'ignored'}), 200

    logger.info(f"Webhook {topic} for {shop}")
    try:
        handler(shop, payload)
    except Exception as e:
        logger.error(f"Webhook {topic} failed for {shop}: {e}")
        _db_log('error', f'Webhook {topic} failed', {'error': str(e)}, shop)
        return jsonify({'error': 'Webhook processing failed'}), 500

    return jsonify({'status': 'ok'}), 200
