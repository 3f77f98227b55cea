"""
Subscribers Models
==================

Leads captured by the storefront popup. Kept locally for stats and export;
the customer record itself lives in Shopify.
"""

import csv
import io
import logging
import sqlite3
from datetime import datetime, timezone

from popupmail.core.config import Config
from popupmail.core.database import Database

logger = logging.getLogger(__name__)

TABLE = Config.SUBSCRIBERS_TABLE

CSV_HEADER = ['Email', 'Phone', 'Campaign', 'Discount Code', 'Created At']

DELETED_CAMPAIGN_TITLE = 'Deleted campaign'


def init_subscribers_db():
    """Initialize the subscribers table in APP_DB"""
    try:
        db_path = Database.app_db_path()
        Database.ensure_dir(db_path)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()

            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    shop TEXT NOT NULL,
                    campaign_id INTEGER NOT NULL,
                    email TEXT,
                    phone TEXT,
                    discount_code TEXT,
                    created_at TEXT NOT NULL
                )
            ''')

            cursor.execute(f'''
                CREATE UNIQUE INDEX IF NOT EXISTS idx_subscribers_unique
                ON {TABLE}(shop, campaign_id, email)
            ''')
            cursor.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_subscribers_shop_created
                ON {TABLE}(shop, created_at)
            ''')

            conn.commit()
            logger.info("Subscribers database table created/verified successfully")

    except Exception as e:
        logger.error(f"Error initializing subscribers database: {e}")
        raise


def _now_iso():
    """UTC timestamp with millisecond precision, e.g. 2024-05-01T10:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def add_subscriber(shop, campaign_id, email=None, phone=None, discount_code=None):
    """
    Store a captured lead. Raises sqlite3.IntegrityError when the same email
    already signed up through this campaign.
    """
    init_subscribers_db()
    with Database.connect(Database.app_db_path()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'''
            INSERT INTO {TABLE} (shop, campaign_id, email, phone, discount_code, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (shop, campaign_id, email or None, phone or None, discount_code, _now_iso()))
        conn.commit()
        return cursor.lastrowid


def get_subscribers(shop, search=None):
    """
    Subscribers of a shop, newest first, each with its campaign title.
    `search` filters on email (case-insensitive) or phone (substring).
    """
    try:
        init_subscribers_db()
        with Database.connect(Database.app_db_path()) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            query = f'''
                SELECT s.id, s.email, s.phone, s.discount_code, s.created_at, s.campaign_id,
                       c.title AS campaign_title
                FROM {TABLE} s
                LEFT JOIN {Config.CAMPAIGNS_TABLE} c ON c.id = s.campaign_id AND c.shop = s.shop
                WHERE s.shop = ?
            '''
            params = [shop]

            if search:
                # Plain substring match; % and _ in the query are literal
                query += " AND (instr(LOWER(COALESCE(s.email, '')), ?) > 0 OR instr(COALESCE(s.phone, ''), ?) > 0)"
                params.extend([search.lower(), search])

            query += ' ORDER BY s.created_at DESC, s.id DESC'
            cursor.execute(query, params)

            subscribers = []
            for row in cursor.fetchall():
                d = dict(row)
                d['campaign_title'] = d['campaign_title'] or DELETED_CAMPAIGN_TITLE
                subscribers.append(d)
            return subscribers

    except Exception as e:
        logger.error(f"Error getting subscribers for {shop}: {e}")
        return []


def get_subscriber_count(shop):
    """Helper function to get the number of subscribers of a shop"""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'SELECT COUNT(*) FROM {TABLE} WHERE shop = ?', (shop,))
            return cursor.fetchone()[0]
    except Exception:
        return 0


def build_csv(subscribers):
    """Render subscriber dicts as CSV text with the export header"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for s in subscribers:
        writer.writerow([
            s.get('email') or '',
            s.get('phone') or '',
            s.get('campaign_title') or '',
            s.get('discount_code') or '',
            s.get('created_at') or '',
        ])
    return buffer.getvalue().rstrip('\n')


def delete_customer_subscribers(shop, email):
    """Remove every row for one customer email (customers/redact)"""
    if not email:
        return 0
    init_subscribers_db()
    with Database.connect(Database.app_db_path()) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f'DELETE FROM {TABLE} WHERE shop = ? AND LOWER(email) = ?',
            (shop, email.lower().strip())
        )
        conn.commit()
        return cursor.rowcount


def delete_shop_subscribers(shop):
    init_subscribers_db()
    with Database.connect(Database.app_db_path()) as conn:
        cursor = conn.cursor()
        cursor.execute(f'DELETE FROM {TABLE} WHERE shop = ?', (shop,))
        conn.commit()
        return cursor.rowcount
