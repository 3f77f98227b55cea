"""
Centralized logging service for Popup Mail.
Provides structured logging with database storage and easy integration.
"""

import json
from datetime import datetime, timedelta
from flask import request, has_request_context
from .database import Database
from .config import Config


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _ensure_logs_table():
        """Ensure the app_logs table exists"""
        try:
            db_path = Database.log_db_path()
            Database.ensure_dir(db_path)
            with Database.connect(db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {Config.LOGS_TABLE} (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp TEXT NOT NULL,
                        level TEXT NOT NULL,
                        source TEXT NOT NULL,
                        message TEXT NOT NULL,
                        details TEXT,
                        ip_address TEXT,
                        user_agent TEXT,
                        request_path TEXT,
                        shop TEXT
                    )
                """)

                cursor.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_logs_timestamp
                    ON {Config.LOGS_TABLE}(timestamp DESC)
                """)
                cursor.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_logs_source
                    ON {Config.LOGS_TABLE}(source)
                """)

                conn.commit()
        except Exception as e:
            print(f"Failed to ensure logs table: {e}")

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        try:
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()

            user_agent = request.headers.get('User-Agent', '')
            request_path = request.path

            return ip_address, user_agent, request_path
        except Exception:
            return None, None, None

    @staticmethod
    def log(level, source, message, details=None, shop=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (campaigns, storefront, subscribers, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            shop (str): Optional shop domain the entry relates to
        """
        try:
            LoggingService._ensure_logs_table()

            ip_address, user_agent, request_path = LoggingService._get_request_context()

            if isinstance(details, dict):
                details = json.dumps(details, indent=2, default=str)

            timestamp = datetime.now().isoformat()

            with Database.connect(Database.log_db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute(f"""
                    INSERT INTO {Config.LOGS_TABLE}
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, shop)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    timestamp, level.upper(), source, message, details,
                    ip_address, user_agent, request_path, shop
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            print(f"[{datetime.now().isoformat()}] [{level.upper()}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

    @staticmethod
    def info(source, message, details=None, shop=None):
        LoggingService.log('INFO', source, message, details, shop)

    @staticmethod
    def warning(source, message, details=None, shop=None):
        LoggingService.log('WARNING', source, message, details, shop)

    @staticmethod
    def error(source, message, details=None, shop=None):
        LoggingService.log('ERROR', source, message, details, shop)

    @staticmethod
    def recent(limit=100, source=None, levels=None, shop=None):
        """Return the most recent log entries as dicts, newest first"""
        try:
            LoggingService._ensure_logs_table()
            with Database.connect(Database.log_db_path()) as conn:
                cursor = conn.cursor()
                query = f"SELECT timestamp, level, source, message, details, shop FROM {Config.LOGS_TABLE}"
                params = []
                conditions = []
                if source:
                    conditions.append("source = ?")
                    params.append(source)
                if levels:
                    conditions.append(f"level IN ({', '.join('?' for _ in levels)})")
                    params.extend(level.upper() for level in levels)
                if shop:
                    conditions.append("shop = ?")
                    params.append(shop)
                if conditions:
                    query += " WHERE " + " AND ".join(conditions)
                query += " ORDER BY id DESC LIMIT ?"
                params.append(limit)
                cursor.execute(query, params)
                columns = ['timestamp', 'level', 'source', 'message', 'details', 'shop']
                return [dict(zip(columns, row)) for row in cursor.fetchall()]
        except Exception as e:
            print(f"Failed to read logs: {e}")
            return []

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Clean up old log entries"""
        try:
            cutoff_iso = (datetime.now() - timedelta(days=days_to_keep)).isoformat()

            with Database.connect(Database.log_db_path()) as conn:
                cursor = conn.cursor()
                cursor.execute(f"""
                    DELETE FROM {Config.LOGS_TABLE}
                    WHERE timestamp < ?
                """, (cutoff_iso,))

                deleted_count = cursor.rowcount
                conn.commit()

                LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
                return deleted_count

        except Exception as e:
            LoggingService.error('system', f"Failed to cleanup old logs: {e}")
            return 0


def db_log(level, source, message, details=None, shop=None):
    """Shortcut used by modules to persist a log entry"""
    LoggingService.log(level, source, message, details, shop)
