"""
Auth Module
===========

Shopify OAuth install flow and merchant admin sessions.

Provides:
- GET /auth/install -- start OAuth for a shop
- GET /auth/callback -- verify, exchange code for an offline token, open admin session
- GET /auth/logout -- drop the admin session
- Offline session store used by the public endpoints to call the Admin API
"""

from flask import Blueprint

auth_bp = Blueprint(
    'auth',
    __name__,
    url_prefix='/auth',
    template_folder='templates'
)

from . import routes
