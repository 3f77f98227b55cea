"""
Campaigns Models
================

Database schema and CRUD operations for popup campaigns.
Every query is scoped by shop domain.
"""

import sqlite3
import logging

from popupmail.core.config import Config
from popupmail.core.database import Database
from .forms import BOOLEAN_FIELDS, EDITABLE_FIELDS

logger = logging.getLogger(__name__)

TABLE = Config.CAMPAIGNS_TABLE


def _db_log(level, message, details=None, shop=None):
    """Log to the persistent DB logger"""
    try:
        from popupmail.core import db_log
        db_log(level, 'campaigns', message, details, shop)
    except Exception:
        pass


def init_campaigns_db():
    """Create the campaigns table in APP_DB"""
    try:
        db_path = Database.app_db_path()
        Database.ensure_dir(db_path)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    shop TEXT NOT NULL,
                    title TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'DRAFT',

                    trigger_delay INTEGER DEFAULT 3,
                    trigger_pages TEXT DEFAULT 'all',
                    trigger_url_param TEXT,
                    show_to_members BOOLEAN DEFAULT 0,
                    redisplay_after_days INTEGER DEFAULT 7,
                    prevent_duplicates BOOLEAN DEFAULT 1,

                    desktop_image TEXT,
                    mobile_image TEXT,
                    image_position TEXT DEFAULT 'left',
                    mobile_image_position TEXT DEFAULT 'top',
                    hide_image_on_mobile BOOLEAN DEFAULT 0,
                    image_ratio INTEGER DEFAULT 40,

                    welcome_title TEXT,
                    welcome_subtitle TEXT,
                    welcome_button_text TEXT,
                    form_title TEXT,
                    form_subtitle TEXT,
                    show_email_field BOOLEAN DEFAULT 1,
                    email_required BOOLEAN DEFAULT 1,
                    email_placeholder TEXT,
                    show_phone_field BOOLEAN DEFAULT 0,
                    phone_required BOOLEAN DEFAULT 0,
                    phone_placeholder TEXT,
                    form_button_text TEXT,
                    success_title TEXT,
                    success_subtitle TEXT,
                    success_btn1_text TEXT,
                    success_btn1_link TEXT,
                    success_btn2_text TEXT,
                    success_btn2_link TEXT,

                    discount_type TEXT DEFAULT 'none',
                    discount_code TEXT,
                    discount_value INTEGER DEFAULT 10,

                    background_color TEXT,
                    text_color TEXT,
                    button_text_color TEXT,
                    accent_color TEXT,
                    overlay_color TEXT,
                    input_border_color TEXT,
                    border_radius INTEGER DEFAULT 16,
                    button_style TEXT DEFAULT 'filled',
                    close_button_style TEXT DEFAULT 'circle',
                    no_thanks_text TEXT,
                    font_family TEXT DEFAULT 'inherit',
                    title_font_size INTEGER DEFAULT 40,
                    subtitle_font_size INTEGER DEFAULT 18,
                    button_font_size INTEGER DEFAULT 16,
                    title_font_size_mobile INTEGER DEFAULT 24,
                    subtitle_font_size_mobile INTEGER DEFAULT 14,
                    button_font_size_mobile INTEGER DEFAULT 14,

                    views INTEGER NOT NULL DEFAULT 0,
                    conversions INTEGER NOT NULL DEFAULT 0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')

            cursor.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_campaigns_shop_status
                ON {TABLE}(shop, status)
            ''')

            conn.commit()
            logger.info("Campaigns database table created/verified successfully")

    except Exception as e:
        logger.error(f"Error initializing campaigns database: {e}")
        _db_log('error', 'Failed to init campaigns DB', {'error': str(e)})
        raise


def get_campaign(campaign_id, shop):
    """Get a single campaign of a shop by ID"""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(f'SELECT * FROM {TABLE} WHERE id = ? AND shop = ?', (campaign_id, shop))
            row = cursor.fetchone()
            if row:
                return _row_to_dict(row)
            return None
    except Exception as e:
        logger.error(f"Error getting campaign {campaign_id}: {e}")
        _db_log('error', f'Error getting campaign {campaign_id}', {'error': str(e)}, shop)
        return None


def get_campaigns(shop):
    """Get all campaigns of a shop, most recently created first"""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(
                f'SELECT * FROM {TABLE} WHERE shop = ? ORDER BY created_at DESC, id DESC',
                (shop,)
            )
            return [_row_to_dict(row) for row in cursor.fetchall()]
    except Exception as e:
        logger.error(f"Error getting campaigns for {shop}: {e}")
        _db_log('error', 'Error getting campaigns', {'error': str(e)}, shop)
        return []


def create_campaign(data):
    """Insert a campaign built by parse_campaign_form. Returns the new ID."""
    try:
        init_campaigns_db()
        columns = ['shop'] + EDITABLE_FIELDS
        placeholders = ', '.join('?' for _ in columns)

        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"INSERT INTO {TABLE} ({', '.join(columns)}) VALUES ({placeholders})",
                [data.get(column) for column in columns]
            )
            conn.commit()
            campaign_id = cursor.lastrowid
            logger.info(f"Created campaign {campaign_id}: {data.get('title')}")
            return campaign_id

    except Exception as e:
        logger.error(f"Error creating campaign: {e}")
        _db_log('error', 'Error creating campaign', {'error': str(e)}, data.get('shop'))
        return None


def update_campaign(campaign_id, shop, data):
    """Overwrite the editable fields of a campaign. Returns True if a row changed."""
    try:
        set_clauses = [f"{field} = ?" for field in EDITABLE_FIELDS]
        set_clauses.append("updated_at = CURRENT_TIMESTAMP")
        values = [data.get(field) for field in EDITABLE_FIELDS]
        values.extend([campaign_id, shop])

        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE {TABLE} SET {', '.join(set_clauses)} WHERE id = ? AND shop = ?",
                values
            )
            conn.commit()
            if cursor.rowcount:
                logger.info(f"Updated campaign {campaign_id}: {data.get('title')}")
            return cursor.rowcount > 0

    except Exception as e:
        logger.error(f"Error updating campaign {campaign_id}: {e}")
        _db_log('error', f'Error updating campaign {campaign_id}', {'error': str(e)}, shop)
        return False


def delete_campaign(campaign_id, shop):
    """Delete a campaign. Its subscribers are kept for the merchant's records."""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {TABLE} WHERE id = ? AND shop = ?', (campaign_id, shop))
            conn.commit()
            if cursor.rowcount:
                logger.info(f"Deleted campaign {campaign_id}")
            return cursor.rowcount > 0
    except Exception as e:
        logger.error(f"Error deleting campaign {campaign_id}: {e}")
        _db_log('error', f'Error deleting campaign {campaign_id}', {'error': str(e)}, shop)
        return False


def delete_shop_campaigns(shop):
    """Remove every campaign of a shop (shop/redact)"""
    with Database.connect(Database.app_db_path()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'DELETE FROM {TABLE} WHERE shop = ?', (shop,))
        conn.commit()
        return cursor.rowcount


# ===================
# STOREFRONT LOOKUPS
# ===================
# These raise sqlite3.Error so callers can tell a failing database from "not found".

def find_active_campaign(shop, campaign_id=None):
    """A specific ACTIVE campaign, or the most recently created ACTIVE one"""
    with Database.connect(Database.app_db_path()) as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        if campaign_id is not None:
            cursor.execute(
                f"SELECT * FROM {TABLE} WHERE id = ? AND shop = ? AND status = 'ACTIVE'",
                (campaign_id, shop)
            )
        else:
            cursor.execute(
                f"""SELECT * FROM {TABLE} WHERE shop = ? AND status = 'ACTIVE'
                    ORDER BY created_at DESC, id DESC LIMIT 1""",
                (shop,)
            )
        row = cursor.fetchone()
        return _row_to_dict(row) if row else None


def find_campaign(shop, campaign_id):
    """A campaign of the shop regardless of status"""
    with Database.connect(Database.app_db_path()) as conn:
        conn.row_factory = sqlite3.Row
        cursor = conn.cursor()
        cursor.execute(f'SELECT * FROM {TABLE} WHERE id = ? AND shop = ?', (campaign_id, shop))
        row = cursor.fetchone()
        return _row_to_dict(row) if row else None


def increment_views(campaign_id):
    """Count a popup view. Failures are logged and swallowed."""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            conn.execute(f'UPDATE {TABLE} SET views = views + 1 WHERE id = ?', (campaign_id,))
            conn.commit()
            return True
    except Exception as e:
        logger.error(f"Failed to increment views for campaign {campaign_id}: {e}")
        _db_log('error', 'Failed to increment views', {'campaign_id': campaign_id, 'error': str(e)})
        return False


def increment_conversions(campaign_id):
    with Database.connect(Database.app_db_path()) as conn:
        conn.execute(f'UPDATE {TABLE} SET conversions = conversions + 1 WHERE id = ?', (campaign_id,))
        conn.commit()


# ===================
# STATS
# ===================

def conversion_rate(views, conversions):
    """Conversions as a percentage string with one decimal, "0%" without views"""
    if not views:
        return "0%"
    return f"{conversions / views * 100:.1f}%"


def campaign_summaries(campaigns):
    """Dashboard rows and totals for a list of campaigns"""
    rows = []
    total_views = 0
    total_conversions = 0
    for c in campaigns:
        total_views += c['views']
        total_conversions += c['conversions']
        rows.append({
            'id': c['id'],
            'title': c['title'],
            'status': c['status'],
            'views': c['views'],
            'conversions': c['conversions'],
            'conversion_rate': conversion_rate(c['views'], c['conversions']),
        })

    return {
        'campaigns': rows,
        'stats': {
            'total_views': total_views,
            'total_conversions': total_conversions,
            'average_rate': conversion_rate(total_views, total_conversions),
        }
    }


def _row_to_dict(row):
    """Convert a sqlite3.Row to a dict with real booleans"""
    d = dict(row)
    for field in BOOLEAN_FIELDS:
        if field in d and d[field] is not None:
            d[field] = bool(d[field])
    return d
