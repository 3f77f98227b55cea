"""
Subscribers Module
==================

Provides:
- Admin list of captured leads with campaign title and search
- CSV export (download or JSON-wrapped)
- Helper functions for other modules (add_subscriber, get_subscriber_count)
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    url_prefix='/app/subscribers',
    template_folder='templates'
)

from . import routes
