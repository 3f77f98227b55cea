"""
Campaigns Module
================

Provides:
- Merchant dashboard with per-campaign views, conversions and conversion rate
- Campaign editor (triggers, content, form fields, discount, styles)
- Create / update / delete, always scoped to the logged-in shop
"""

from flask import Blueprint

campaigns_bp = Blueprint(
    'campaigns',
    __name__,
    url_prefix='/app',
    template_folder='templates'
)

from . import routes
