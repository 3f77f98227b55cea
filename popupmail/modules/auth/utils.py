import base64
import hashlib
import hmac
from functools import wraps

from flask import redirect, request, session, url_for


def verify_hmac(params, secret):
    """Verify the `hmac` parameter Shopify adds to OAuth redirects"""
    received = params.get('hmac', '')
    if not received or not secret:
        return False
    message = '&'.join(
        f'{key}={params[key]}' for key in sorted(params.keys()) if key not in ('hmac', 'signature')
    )
    expected = hmac.new(secret.encode('utf-8'), message.encode('utf-8'), hashlib.sha256).hexdigest()
    return hmac.compare_digest(received, expected)


def verify_proxy_signature(params, secret):
    """
    Verify the `signature` parameter on app proxy requests.
    Unlike OAuth, the pairs are concatenated without a separator.
    """
    received = params.get('signature', '')
    if not received or not secret:
        return False
    message = ''.join(
        f'{key}={params[key]}' for key in sorted(params.keys()) if key != 'signature'
    )
    expected = hmac.new(secret.encode('utf-8'), message.encode('utf-8'), hashlib.sha256).hexdigest()
    return hmac.compare_digest(received, expected)


def verify_webhook(body, hmac_header, secret):
    """Verify X-Shopify-Hmac-Sha256 (base64 HMAC of the raw body)"""
    if not hmac_header or not secret:
        return False
    digest = hmac.new(secret.encode('utf-8'), body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode('utf-8')
    return hmac.compare_digest(hmac_header, expected)


def current_shop():
    """Shop domain of the logged-in merchant, if any"""
    return session.get('shop')


def admin_required(f):
    """Decorator to require a merchant admin session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'shop' not in session:
            shop = request.args.get('shop')
            if shop:
                return redirect(url_for('auth.install', shop=shop))
            return redirect(url_for('auth.login'))
        return f(*args, **kwargs)
    return decorated_function
