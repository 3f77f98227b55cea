"""
Campaigns Routes
================

Merchant admin: dashboard, campaign editor, save and delete.
All routes require an admin session for the shop.
"""

import logging
from flask import abort, flash, jsonify, redirect, render_template, request, url_for

from popupmail.modules.auth.utils import admin_required, current_shop
from . import campaigns_bp
from . import forms
from .forms import CAMPAIGN_DEFAULTS, parse_campaign_form
from .models import (
    init_campaigns_db, get_campaign, get_campaigns, create_campaign,
    update_campaign, delete_campaign, campaign_summaries
)

logger = logging.getLogger(__name__)


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'campaigns', message, details, shop)
    except Exception:
        pass


def _editor_context(campaign, is_new):
    return {
        'campaign': campaign,
        'is_new': is_new,
        'statuses': forms.STATUSES,
        'trigger_pages': forms.TRIGGER_PAGES,
        'image_positions': forms.IMAGE_POSITIONS,
        'mobile_image_positions': forms.MOBILE_IMAGE_POSITIONS,
        'discount_types': forms.DISCOUNT_TYPES,
        'button_styles': forms.BUTTON_STYLES,
        'close_button_styles': forms.CLOSE_BUTTON_STYLES,
        'font_families': forms.FONT_FAMILIES,
    }


# ===================
# ADMIN ROUTES
# ===================

@campaigns_bp.route('/')
@admin_required
def index():
    """Dashboard: campaign list with view/conversion stats"""
    init_campaigns_db()
    shop = current_shop()
    summary = campaign_summaries(get_campaigns(shop))
    return render_template('campaigns/index.html', shop=shop, **summary)


@campaigns_bp.route('/campaigns/api')
def campaigns_api():
    """Same data as the dashboard, as JSON"""
    shop = current_shop()
    if not shop:
        return jsonify({'error': 'Authentication required'}), 401

    init_campaigns_db()
    return jsonify(campaign_summaries(get_campaigns(shop))), 200


@campaigns_bp.route('/campaigns/new', methods=['GET'])
@admin_required
def new_campaign():
    """Editor pre-filled with defaults"""
    blank = dict(CAMPAIGN_DEFAULTS, id=None)
    return render_template('campaigns/editor.html', **_editor_context(blank, True))


@campaigns_bp.route('/campaigns/new', methods=['POST'])
@admin_required
def create():
    shop = current_shop()
    data = parse_campaign_form(request.form, shop)

    campaign_id = create_campaign(data)
    if not campaign_id:
        flash('Could not save campaign, please try again.', 'error')
        return render_template('campaigns/editor.html', **_editor_context(data, True)), 500

    _db_log('info', f'Campaign created: {data["title"]}', {'id': campaign_id}, shop)
    flash('Campaign saved', 'success')
    return redirect(url_for('campaigns.index'))


@campaigns_bp.route('/campaigns/<int:campaign_id>', methods=['GET'])
@admin_required
def edit_campaign(campaign_id):
    init_campaigns_db()
    campaign = get_campaign(campaign_id, current_shop())
    if not campaign:
        abort(404, description='Campaign not found')
    return render_template('campaigns/editor.html', **_editor_context(campaign, False))


@campaigns_bp.route('/campaigns/<int:campaign_id>', methods=['POST'])
@admin_required
def save(campaign_id):
    """Update a campaign, or delete it when intent=delete"""
    shop = current_shop()
    init_campaigns_db()

    if not get_campaign(campaign_id, shop):
        abort(404, description='Campaign not found')

    if request.form.get('intent') == 'delete':
        if delete_campaign(campaign_id, shop):
            _db_log('info', 'Campaign deleted', {'id': campaign_id}, shop)
            flash('Campaign deleted', 'success')
        else:
            flash('Could not delete campaign', 'error')
        return redirect(url_for('campaigns.index'))

    data = parse_campaign_form(request.form, shop)
    if not update_campaign(campaign_id, shop, data):
        flash('Could not save campaign, please try again.', 'error')
        data['id'] = campaign_id
        return render_template('campaigns/editor.html', **_editor_context(data, False)), 500

    logger.info(f"Campaign saved: {campaign_id}")
    _db_log('info', f'Campaign saved: {data["title"]}', {'id': campaign_id}, shop)
    flash('Campaign saved', 'success')
    return redirect(url_for('campaigns.index'))
