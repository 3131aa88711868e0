"""
Database helpers and lazy schema bootstrap.

Every request that touches the store calls ``Database.connection()``, which
opens a short-lived sqlite3 connection and runs ``ensure_schema`` on it before
handing it to the caller. The bootstrap is idempotent and also upgrades legacy
databases whose ``subscriptions`` or ``profiles`` tables predate some columns.
"""

import os
import sqlite3
import logging
from contextlib import contextmanager
from datetime import datetime, timezone

from flask import current_app

from .config import Config

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_DDL = """
    CREATE TABLE IF NOT EXISTS subscriptions (
        email TEXT PRIMARY KEY,
        created_at TEXT NOT NULL,
        updated_at TEXT,
        confirmed INTEGER NOT NULL DEFAULT 0,
        confirmation_token TEXT,
        token_created_at TEXT
    )
"""

PROFILES_DDL = """
    CREATE TABLE IF NOT EXISTS profiles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL UNIQUE REFERENCES subscriptions(email),
        name TEXT NOT NULL,
        bio TEXT NOT NULL,
        password_hash TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
"""

# Columns added on demand to databases created before they existed.
# ALTER TABLE cannot add NOT NULL columns without a default, so created_at is nullable here.
SUBSCRIPTION_COLUMNS = [
    ('created_at', 'TEXT'),
    ('updated_at', 'TEXT'),
    ('confirmed', 'INTEGER NOT NULL DEFAULT 0'),
    ('confirmation_token', 'TEXT'),
    ('token_created_at', 'TEXT'),
]

PROFILE_COLUMNS = [
    ('password_hash', 'TEXT'),
]


def utc_now():
    """ISO-8601 UTC timestamp used for every created_at/updated_at column"""
    return datetime.now(timezone.utc).isoformat()


def _column_exists(cursor, table, column):
    cursor.execute(f"SELECT name FROM pragma_table_info('{table}') WHERE name = ?", (column,))
    return cursor.fetchone() is not None


def _ensure_columns(cursor, table, columns):
    added = []
    for column, definition in columns:
        if not _column_exists(cursor, table, column):
            cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
            added.append(column)
    if added:
        logger.info(f"Migrated {table} table: added columns {', '.join(added)}")
    return added


def ensure_schema(conn):
    """
    Create the subscriptions and profiles tables if absent and add any
    column a legacy database is missing.

    Returns:
        dict mapping table name to the list of columns that were added
    """
    cursor = conn.cursor()
    cursor.execute(SUBSCRIPTIONS_DDL)
    cursor.execute(PROFILES_DDL)

    migrated = {
        Config.SUBSCRIPTIONS_TABLE: _ensure_columns(cursor, Config.SUBSCRIPTIONS_TABLE, SUBSCRIPTION_COLUMNS),
        Config.PROFILES_TABLE: _ensure_columns(cursor, Config.PROFILES_TABLE, PROFILE_COLUMNS),
    }
    conn.commit()
    return migrated


def get_db_path():
    """Get the database path from app config, falling back to Config"""
    try:
        val = current_app.config.get('SOLARROOTS_DB')
        if val:
            return val
    except RuntimeError:
        pass
    return Config.SOLARROOTS_DB


class Database:

    @staticmethod
    def connect(path=None):
        path = path or get_db_path()
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    @contextmanager
    def connection(path=None):
        """
        Yield a connection whose schema has been bootstrapped.
        Commits on success, rolls back on error, always closes.
        """
        conn = Database.connect(path)
        try:
            ensure_schema(conn)
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    @staticmethod
    def ping(path=None):
        """Run a trivial query, used by the health check"""
        conn = Database.connect(path)
        try:
            conn.execute("SELECT 1").fetchone()
            return True
        finally:
            conn.close()
