"""
Ops Routes
==========

Health endpoint reporting whether the application database answers, plus
the recent error feed for the signed-in shop.
"""

from datetime import datetime

from flask import jsonify, request, session

from popupmail.core.database import Database
from popupmail.core.logging_service import LoggingService
from popupmail.modules.auth.utils import admin_required
from . import ops_health_bp

ERROR_LEVELS = ('ERROR', 'CRITICAL')


def _build_health_response():
    """Build the health check response dict."""
    ok, error = Database.ping()
    database = {'ok': ok}
    if error:
        database['error'] = error

    status = 'ok' if ok else 'critical'
    return {
        'status': status,
        'timestamp': datetime.now().isoformat(),
        'checks': {
            'database': database,
        },
    }, status


def _get_recent_errors(shop, limit=50):
    """ERROR/CRITICAL entries from app_logs for one shop, newest first."""
    return LoggingService.recent(limit=limit, levels=ERROR_LEVELS, shop=shop)


# Public routes (no auth)

@ops_health_bp.route('/')
@ops_health_bp.route('')
def health_check():
    """Public health endpoint for uptime monitors."""
    data, status = _build_health_response()
    code = 503 if status == 'critical' else 200
    return jsonify(data), code


# Admin routes (session auth)

@ops_health_bp.route('/errors')
@admin_required
def api_errors():
    """Recent errors logged for the signed-in shop."""
    limit = request.args.get('limit', 50, type=int)
    errors = _get_recent_errors(session['shop'], limit=max(1, min(limit, 200)))
    return jsonify({'errors': errors, 'count': len(errors)})
