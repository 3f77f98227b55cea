"""
Storefront Routes
=================

Public, unauthenticated endpoints. Every response carries
Access-Control-Allow-Origin: * so the theme script can call them cross-origin.
"""

import re
import sqlite3
import logging
from flask import jsonify, request
from flask_cors import cross_origin

from popupmail.core.database import get_config_value
from popupmail.core.shopify import ShopifyAdminClient, ShopifyAPIError
from popupmail.modules.auth.utils import verify_proxy_signature
from popupmail.modules.campaigns.models import (
    init_campaigns_db, find_active_campaign, find_campaign,
    increment_views, increment_conversions
)
from popupmail.modules.subscribers.models import add_subscriber
from . import storefront_bp
from .customers import resolve_discount_code, sync_customer
from .public_config import build_public_config
from .triggers import evaluate

# Email validation regex: rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

CONFIG_CACHE_CONTROL = 'public, max-age=60'

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'storefront', message, details, shop)
    except Exception:
        pass


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > 255:
        return False
    return EMAIL_REGEX.match(email.lower().strip()) is not None


def _parse_campaign_id(raw):
    """Campaign IDs arrive as strings from the theme; None when absent or malformed"""
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


# ===================
# CAMPAIGN CONFIG
# ===================

def _campaign_config(args):
    shop = (args.get('shop') or '').strip().lower()
    if not shop:
        return jsonify({'error': 'Shop parameter required'}), 400

    raw_id = args.get('campaignId')
    campaign_id = _parse_campaign_id(raw_id) if raw_id else None
    if raw_id and campaign_id is None:
        return jsonify({'error': 'No active campaign found'}), 404

    try:
        init_campaigns_db()
        campaign = find_active_campaign(shop, campaign_id)
    except sqlite3.Error as e:
        logger.error(f"Database error: {e}")
        _db_log('error', 'Database error loading campaign config', {'error': str(e)}, shop)
        return jsonify({'error': 'Database error'}), 500

    if not campaign:
        return jsonify({'error': 'No active campaign found'}), 404

    config = build_public_config(campaign)

    # The script sends its location so views are only counted where the popup can appear
    path = args.get('path')
    if path is not None:
        decision = evaluate(config, path, args.get('search', ''))
        if not decision.show:
            return jsonify({'id': campaign['id'], 'show': False}), 200
        config['forced'] = decision.forced

    increment_views(campaign['id'])

    response = jsonify(config)
    response.headers['Cache-Control'] = CONFIG_CACHE_CONTROL
    return response, 200


@storefront_bp.route('/api/campaign', methods=['GET'])
@cross_origin(origins='*', send_wildcard=True)
def campaign_config():
    """Public endpoint: active campaign config for a shop"""
    return _campaign_config(request.args)


# ===================
# SUBSCRIBE
# ===================

def _text(value):
    """Form values as stripped strings; the theme may send numbers"""
    return str(value).strip() if value is not None else ''


def _subscribe(data):
    if not isinstance(data, dict):
        return jsonify({'error': 'Invalid request body'}), 400

    shop = _text(data.get('shop')).lower()
    raw_campaign_id = data.get('campaignId')
    email = _text(data.get('email')).lower() or None
    phone = _text(data.get('phone')) or None

    logger.info(f"[Subscribe] Received request: shop={shop} campaign={raw_campaign_id} email={email}")

    if not shop or not raw_campaign_id:
        return jsonify({'error': 'Missing required fields'}), 400

    if not email and not phone:
        return jsonify({'error': 'Email or phone is required'}), 400

    if email and not validate_email(email):
        return jsonify({'error': 'Please enter a valid email address'}), 400

    # Honeypot: a hidden input only bots fill in. Answer like a success.
    if data.get('website'):
        logger.info(f"Bot signup blocked: {email} (honeypot)")
        _db_log('warning', 'Bot signup blocked: honeypot', {'email': email}, shop)
        return jsonify({'success': True, 'discountCode': None}), 200

    campaign_id = _parse_campaign_id(raw_campaign_id)
    init_campaigns_db()
    campaign = find_campaign(shop, campaign_id) if campaign_id is not None else None
    if not campaign:
        logger.info(f"[Subscribe] Campaign not found: {raw_campaign_id}")
        return jsonify({'error': 'Campaign not found'}), 404

    discount_code = resolve_discount_code(campaign)

    if email:
        try:
            client = ShopifyAdminClient.for_shop(shop)
            outcome = sync_customer(client, email, phone, campaign_id)

            if outcome == 'updated' and campaign['prevent_duplicates']:
                logger.info(f"[Subscribe] Existing customer, duplicate sign-up: {email}")
                return jsonify({
                    'success': True,
                    'duplicate': True,
                    'discountCode': discount_code or campaign.get('discount_code'),
                }), 200
        except ShopifyAPIError as e:
            # Still record the lead locally
            logger.error(f"[Subscribe] Admin API error: {e}")
            _db_log('error', 'Admin API error during subscribe', {'error': str(e)}, shop)
    else:
        logger.info("[Subscribe] No email given, skipping Shopify customer sync")

    try:
        add_subscriber(shop, campaign_id, email, phone, discount_code)
        logger.info("[Subscribe] Saved to local DB")
    except sqlite3.Error as e:
        logger.info(f"[Subscribe] Subscriber may already exist: {e}")

    increment_conversions(campaign_id)
    _db_log('info', 'New subscriber', {'campaign_id': campaign_id, 'email': email, 'phone': phone}, shop)

    return jsonify({'success': True, 'discountCode': discount_code}), 200


@storefront_bp.route('/api/subscribe', methods=['GET', 'POST'])
@cross_origin(origins='*', send_wildcard=True, methods=['POST', 'OPTIONS'], allow_headers=['Content-Type'])
def subscribe():
    """Public endpoint: capture a lead from the popup form"""
    if request.method != 'POST':
        return jsonify({'error': 'Method not allowed'}), 405

    try:
        data = request.get_json(silent=True) or {}
        return _subscribe(data)
    except Exception as e:
        logger.error(f"[Subscribe] Error: {e}")
        _db_log('error', 'Error in subscribe', {'error': str(e)})
        return jsonify({'error': 'Internal server error'}), 500


# ===================
# APP PROXY
# ===================

def _skip_proxy_signature():
    # Only a real true or the string "true" switches the check off
    value = get_config_value('SKIP_PROXY_SIGNATURE')
    return value is True or str(value).strip().lower() == 'true'


def _check_proxy_signature():
    """
    Verify the app proxy signature in production.
    Returns an error response, or None when the request may proceed.
    """
    if get_config_value('ENVIRONMENT') != 'production' or _skip_proxy_signature():
        return None

    if not verify_proxy_signature(request.args.to_dict(), get_config_value('SHOPIFY_API_SECRET')):
        logger.warning(f"Proxy signature verification failed. Params: {list(request.args.keys())}")
        return jsonify({'error': 'Invalid signature'}), 401
    return None


@storefront_bp.route('/proxy/api/campaign', methods=['GET'])
def proxy_campaign_config():
    """Config endpoint reached through https://<shop>/apps/popup-mail/api/campaign"""
    error = _check_proxy_signature()
    if error:
        return error
    return _campaign_config(request.args)


@storefront_bp.route('/proxy/api/subscribe', methods=['POST'])
def proxy_subscribe():
    error = _check_proxy_signature()
    if error:
        return error

    try:
        data = request.get_json(silent=True) or {}
        # Shopify appends the signed shop; trust it over the body
        if isinstance(data, dict) and request.args.get('shop'):
            data['shop'] = request.args['shop']
        return _subscribe(data)
    except Exception as e:
        logger.error(f"[Subscribe] Error: {e}")
        _db_log('error', 'Error in proxy subscribe', {'error': str(e)})
        return jsonify({'error': 'Internal server error'}), 500
