"""
Auth Routes
===========

OAuth install flow for merchants. The offline token obtained here is what the
public storefront endpoints use to reach the Admin API on the shop's behalf.
"""

import logging
import secrets
from urllib.parse import urlencode

import requests
from flask import jsonify, redirect, render_template, request, session, url_for

from popupmail.core.database import get_config_value
from popupmail.core.shopify import normalize_shop_domain
from . import auth_bp
from .sessions import init_sessions_db, save_session
from .utils import verify_hmac

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'auth', message, details, shop)
    except Exception:
        pass


@auth_bp.route('/login', methods=['GET'])
def login():
    """Ask for the shop domain when the app is opened outside the Shopify admin"""
    return render_template('auth/login.html')


@auth_bp.route('/install', methods=['GET'])
def install():
    """Redirect the merchant to Shopify's OAuth consent screen"""
    shop = normalize_shop_domain(request.args.get('shop'))
    if not shop:
        return jsonify({'error': 'A valid *.myshopify.com shop parameter is required'}), 400

    api_key = get_config_value('SHOPIFY_API_KEY')
    if not api_key:
        logger.error("SHOPIFY_API_KEY is not configured")
        return jsonify({'error': 'App is not configured'}), 500

    state = secrets.token_urlsafe(16)
    session['oauth_state'] = state

    redirect_uri = get_config_value('APP_URL', request.host_url.rstrip('/')).rstrip('/') + url_for('auth.callback')
    query = urlencode({
        'client_id': api_key,
        'scope': get_config_value('SHOPIFY_SCOPES', ''),
        'redirect_uri': redirect_uri,
        'state': state,
    })
    return redirect(f'https://{shop}/admin/oauth/authorize?{query}')


@auth_bp.route('/callback', methods=['GET'])
def callback():
    """Finish OAuth: verify the redirect, store the offline token, open the admin session"""
    params = request.args.to_dict()
    shop = normalize_shop_domain(params.get('shop'))
    if not shop:
        return jsonify({'error': 'Invalid shop'}), 400

    secret = get_config_value('SHOPIFY_API_SECRET')
    if not verify_hmac(params, secret):
        logger.warning(f"OAuth callback with invalid HMAC for {shop}")
        _db_log('warning', 'OAuth callback HMAC mismatch', shop=shop)
        return jsonify({'error': 'Invalid signature'}), 401

    expected_state = session.pop('oauth_state', None)
    if not expected_state or params.get('state') != expected_state:
        return jsonify({'error': 'Invalid state'}), 401

    try:
        response = requests.post(
            f'https://{shop}/admin/oauth/access_token',
            json={
                'client_id': get_config_value('SHOPIFY_API_KEY'),
                'client_secret': secret,
                'code': params.get('code', ''),
            },
            timeout=30
        )
        response.raise_for_status()
        token_data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Token exchange failed for {shop}: {e}")
        _db_log('error', 'Token exchange failed', {'error': str(e)}, shop=shop)
        return jsonify({'error': 'Could not complete installation'}), 502

    access_token = token_data.get('access_token')
    if not access_token:
        return jsonify({'error': 'Could not complete installation'}), 502

    init_sessions_db()
    save_session(shop, access_token, token_data.get('scope'))

    session['shop'] = shop
    logger.info(f"Installed / logged in: {shop}")
    _db_log('info', 'App installed or re-authorised', shop=shop)

    return redirect(url_for('campaigns.index'))


@auth_bp.route('/logout', methods=['GET'])
def logout():
    session.pop('shop', None)
    return redirect(url_for('auth.login'))
