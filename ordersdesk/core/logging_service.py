"""
Centralized logging service for the Ordersdesk extension.
Stores structured log rows in the app_logs table so operators can trace
fetch failures, filter fallbacks and export problems after the fact.
"""

import json
import traceback
from datetime import datetime
from flask import request, has_request_context, session
from .database import Database
from .config import get_setting


class LoggingService:
    """Centralized logging service for application-wide logging"""

    @staticmethod
    def _db_path():
        return get_setting('ANALYTICS_DB')

    @staticmethod
    def _ensure_logs_table(conn):
        """Ensure the app_logs table exists"""
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS app_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT NOT NULL,
                source TEXT NOT NULL,
                message TEXT NOT NULL,
                details TEXT,
                ip_address TEXT,
                user_agent TEXT,
                request_path TEXT,
                user_id TEXT
            )
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_timestamp
            ON app_logs(timestamp DESC)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_logs_source
            ON app_logs(source)
        """)

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None, None

        try:
            ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
            if ip_address and ',' in ip_address:
                ip_address = ip_address.split(',')[0].strip()

            user_agent = request.headers.get('User-Agent', '')
            admin_id = session.get('admin_id')
            return ip_address, user_agent, request.path, str(admin_id) if admin_id is not None else None
        except Exception:
            return None, None, None, None

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (orders, order_service, exports, ...)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier, defaults to the session admin
        """
        try:
            ip_address, user_agent, request_path, session_user = LoggingService._get_request_context()

            if isinstance(details, (dict, list)):
                details = json.dumps(details, indent=2, default=str, ensure_ascii=False)

            timestamp = datetime.now().isoformat()

            with Database.connect(LoggingService._db_path()) as conn:
                LoggingService._ensure_logs_table(conn)
                conn.execute("""
                    INSERT INTO app_logs
                    (timestamp, level, source, message, details, ip_address, user_agent, request_path, user_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    timestamp, level.upper(), source, message, details,
                    ip_address, user_agent, request_path, user_id or session_user
                ))
                conn.commit()

        except Exception as e:
            # Fallback to console logging if database fails
            print(f"[{datetime.now().isoformat()}] [{level.upper()}] [{source}] {message}")
            if details:
                print(f"Details: {details}")
            print(f"Logging service error: {e}")

    @staticmethod
    def info(source, message, details=None, user_id=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log operator actions (status change, export, ...)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def recent_logs(source=None, limit=50):
        """Return the newest log rows, optionally for one source"""
        with Database.connect(LoggingService._db_path()) as conn:
            LoggingService._ensure_logs_table(conn)
            cursor = conn.cursor()
            if source:
                cursor.execute("""
                    SELECT timestamp, level, source, message, details
                    FROM app_logs WHERE source = ?
                    ORDER BY id DESC LIMIT ?
                """, (source, limit))
            else:
                cursor.execute("""
                    SELECT timestamp, level, source, message, details
                    FROM app_logs ORDER BY id DESC LIMIT ?
                """, (limit,))
            columns = ['timestamp', 'level', 'source', 'message', 'details']
            return [dict(zip(columns, row)) for row in cursor.fetchall()]


def db_log(level, source, message, details=None):
    """Shorthand used by modules: db_log('error', 'orders', 'Fetch failed', {...})"""
    LoggingService.log(level, source, message, details)

