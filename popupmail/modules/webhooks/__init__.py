"""
Webhooks Module
===============

Shopify app lifecycle and mandatory privacy webhooks:
- app/uninstalled -- drop the shop's offline session
- customers/data_request -- logged for the merchant to follow up
- customers/redact -- delete the customer's subscriber rows
- shop/redact -- delete everything stored for the shop
"""

from flask import Blueprint

webhooks_bp = Blueprint('webhooks', __name__, url_prefix='/webhooks')

from . import routes
