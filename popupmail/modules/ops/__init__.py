"""
Ops Module
==========

Public /health endpoint for uptime monitors and load balancers (no auth),
and /health/errors, the recent error feed for a signed-in shop.
"""

from flask import Blueprint

ops_health_bp = Blueprint(
    'ops_health',
    __name__,
    url_prefix='/health'
)

from . import routes
