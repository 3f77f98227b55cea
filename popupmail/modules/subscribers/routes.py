"""
Subscribers Routes
==================

Provides:
- GET /app/subscribers -- list (optional ?q= email/phone filter)
- GET /app/subscribers/api -- same list as JSON
- POST /app/subscribers/export -- CSV download, or {csv, filename} with ?format=json
"""

import time
import logging
from flask import Response, jsonify, render_template, request

from popupmail.modules.auth.utils import admin_required, current_shop
from . import subscribers_bp
from .models import get_subscribers, get_subscriber_count, build_csv

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'subscribers', message, details, shop)
    except Exception:
        pass


@subscribers_bp.route('', methods=['GET'])
@admin_required
def subscriber_list():
    shop = current_shop()
    search = request.args.get('q', '').strip()

    subscribers = get_subscribers(shop, search or None)

    return render_template(
        'subscribers/list.html',
        shop=shop,
        subscribers=subscribers,
        total_count=get_subscriber_count(shop),
        search=search
    )


@subscribers_bp.route('/api', methods=['GET'])
def subscriber_list_api():
    shop = current_shop()
    if not shop:
        return jsonify({'error': 'Authentication required'}), 401

    subscribers = get_subscribers(shop, request.args.get('q', '').strip() or None)
    return jsonify({
        'subscribers': subscribers,
        'total_count': len(subscribers)
    }), 200


@subscribers_bp.route('/export', methods=['POST'])
def export_subscribers():
    """Export every subscriber of the shop as CSV"""
    shop = current_shop()
    if not shop:
        return jsonify({'error': 'Authentication required'}), 401

    try:
        subscribers = get_subscribers(shop)
        csv_text = build_csv(subscribers)
        filename = f"subscribers-{int(time.time() * 1000)}.csv"

        logger.info(f"Exported {len(subscribers)} subscribers for {shop}")
        _db_log('info', 'Subscribers exported', {'count': len(subscribers)}, shop)

        if request.args.get('format') == 'json':
            return jsonify({'csv': csv_text, 'filename': filename}), 200

        return Response(
            csv_text,
            mimetype='text/csv',
            headers={'Content-Disposition': f'attachment; filename={filename}'}
        )

    except Exception as e:
        logger.error(f"Error in export_subscribers: {e}")
        _db_log('error', 'Error exporting subscribers', {'error': str(e)}, shop)
        return jsonify({'error': 'An unexpected error occurred'}), 500
