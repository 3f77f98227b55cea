import os
import sqlite3
from .config import Config


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then host Config import, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val:
            return val
    except RuntimeError:
        pass
    try:
        from config import Config as HostConfig
        val = getattr(HostConfig, key, None)
        if val:
            return val
    except ImportError:
        pass
    val = getattr(Config, key, None)
    if val:
        return val
    return os.getenv(key, default)


class Database:

    @staticmethod
    def connect(path):
        return sqlite3.connect(path)

    @staticmethod
    def app_db_path():
        """Path of the application database (sessions, campaigns, subscribers)"""
        return get_config_value('APP_DB', 'popupmail.db')

    @staticmethod
    def log_db_path():
        return get_config_value('LOG_DB', 'app_logs.db')

    @staticmethod
    def ensure_dir(path):
        """Create the parent directory of a database file if needed"""
        db_dir = os.path.dirname(path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

    @staticmethod
    def ping():
        """
        Run a trivial query against the application database.
        Returns (ok, error_message).
        """
        try:
            with Database.connect(Database.app_db_path()) as conn:
                conn.execute("SELECT 1").fetchone()
            return True, None
        except sqlite3.Error as e:
            return False, str(e)
