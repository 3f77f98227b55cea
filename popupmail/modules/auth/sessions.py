"""
Offline session storage: one access token per installed shop.
"""

import logging

from popupmail.core.config import Config
from popupmail.core.database import Database

logger = logging.getLogger(__name__)


def init_sessions_db():
    """Create the shop_sessions table in APP_DB"""
    try:
        db_path = Database.app_db_path()
        Database.ensure_dir(db_path)

        with Database.connect(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                CREATE TABLE IF NOT EXISTS {Config.SESSIONS_TABLE} (
                    shop TEXT PRIMARY KEY,
                    access_token TEXT NOT NULL,
                    scope TEXT,
                    installed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.commit()
            logger.info("Sessions table created/verified successfully")
    except Exception as e:
        logger.error(f"Error initializing sessions table: {e}")
        raise


def save_session(shop, access_token, scope=None):
    """Insert or replace the offline token for a shop"""
    try:
        init_sessions_db()
        with Database.connect(Database.app_db_path()) as conn:
            conn.execute(f'''
                INSERT INTO {Config.SESSIONS_TABLE} (shop, access_token, scope)
                VALUES (?, ?, ?)
                ON CONFLICT(shop) DO UPDATE SET
                    access_token = excluded.access_token,
                    scope = excluded.scope,
                    updated_at = CURRENT_TIMESTAMP
            ''', (shop, access_token, scope))
            conn.commit()
            logger.info(f"Stored offline session for {shop}")
            return True
    except Exception as e:
        logger.error(f"Error saving session for {shop}: {e}")
        return False


def get_session(shop):
    """Return {'shop', 'access_token', 'scope', 'installed_at'} or None"""
    try:
        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                SELECT shop, access_token, scope, installed_at
                FROM {Config.SESSIONS_TABLE}
                WHERE shop = ?
            ''', (shop,))
            row = cursor.fetchone()
            if row:
                return dict(zip(['shop', 'access_token', 'scope', 'installed_at'], row))
            return None
    except Exception as e:
        logger.error(f"Error loading session for {shop}: {e}")
        return None


def delete_session(shop):
    try:
        with Database.connect(Database.app_db_path()) as conn:
            cursor = conn.cursor()
            cursor.execute(f'DELETE FROM {Config.SESSIONS_TABLE} WHERE shop = ?', (shop,))
            conn.commit()
            return cursor.rowcount > 0
    except Exception as e:
        logger.error(f"Error deleting session for {shop}: {e}")
        return False
