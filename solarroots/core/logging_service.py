"""
Persistent event log for the Solar Roots backend.

Every entry goes to the stdlib logger first and is then stored as an app_logs
row next to the subscription data, so operators can inspect failed sends,
rejected admin logins and handler exceptions without shell access.
"""

import json
import logging
import traceback
from datetime import datetime

from flask import request, has_request_context

from .config import Config
from .database import Database, get_db_path

logger = logging.getLogger(__name__)

APP_LOGS_DDL = f"""
    CREATE TABLE IF NOT EXISTS {Config.APP_LOGS_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL,
        level TEXT NOT NULL,
        source TEXT NOT NULL,
        message TEXT NOT NULL,
        details TEXT,
        ip_address TEXT,
        user_agent TEXT,
        request_path TEXT
    )
"""


def _client_info():
    """(ip, user agent, path) of the current request, or Nones outside one"""
    if not has_request_context():
        return None, None, None

    # First hop of X-Forwarded-For is the real client behind the proxy
    forwarded = request.headers.get('X-Forwarded-For', '')
    ip_address = forwarded.split(',')[0].strip() if forwarded else request.remote_addr
    return ip_address, request.headers.get('User-Agent', '')[:500], request.path


class LoggingService:
    """Writes structured app_logs rows; never raises into the caller"""

    @staticmethod
    def log(level, source, message, details=None, db_path=None):
        """
        Record one event.

        Args:
            level (str): DEBUG, INFO, WARNING, ERROR or CRITICAL
            source (str): component name (subscriptions, profiles, security, email)
            message (str): short human-readable summary
            details (dict/str): extra context, stored as JSON when a dict
            db_path (str): target database; needed when called outside an app context
        """
        level = level.upper()
        logger.log(getattr(logging, level, logging.INFO), f"[{source}] {message}")

        if isinstance(details, dict):
            details = json.dumps(details, default=str)
        ip_address, user_agent, request_path = _client_info()

        try:
            conn = Database.connect(db_path or get_db_path())
            try:
                conn.execute(APP_LOGS_DDL)
                conn.execute(f"""
                    INSERT INTO {Config.APP_LOGS_TABLE}
                        (timestamp, level, source, message, details, ip_address, user_agent, request_path)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (datetime.now().isoformat(), level, source, message, details,
                      ip_address, user_agent, request_path))
                conn.commit()
            finally:
                conn.close()
        except Exception as e:
            logger.warning(f"Could not store app log entry: {e}")

    @staticmethod
    def info(source, message, details=None, db_path=None):
        LoggingService.log('INFO', source, message, details, db_path)

    @staticmethod
    def warning(source, message, details=None, db_path=None):
        LoggingService.log('WARNING', source, message, details, db_path)

    @staticmethod
    def error(source, message, details=None, db_path=None):
        LoggingService.log('ERROR', source, message, details, db_path)

    @staticmethod
    def log_error_with_traceback(source, error, details=None, db_path=None):
        """Store an exception caught at a route boundary, traceback included"""
        payload = {
            'exception': type(error).__name__,
            'detail': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            payload['context'] = details

        LoggingService.error(source, f"Unhandled {type(error).__name__}", payload, db_path)

    @staticmethod
    def log_security_event(message, details=None):
        LoggingService.warning('security', message, details)


def db_log(level, source, message, details=None, db_path=None):
    """Shortcut used by the route modules"""
    LoggingService.log(level, source, message, details, db_path)
