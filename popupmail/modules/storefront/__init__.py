"""
Storefront Module
=================

Public endpoints consumed by the popup script injected into the merchant's theme.

Provides:
- GET /api/campaign -- active campaign config (CORS *)
- POST /api/subscribe -- capture a lead, sync it to Shopify, hand out the discount code (CORS *)
- /proxy/api/... -- the same endpoints behind the Shopify app proxy (signed requests)
- /storefront/static/popup.js, popup.css -- the widget itself
"""

from flask import Blueprint

storefront_bp = Blueprint(
    'storefront',
    __name__,
    static_folder='static',
    static_url_path='/storefront/static'
)

from . import routes
