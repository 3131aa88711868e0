"""
Solar Roots Core
================

Configuration, database access and logging shared by every module.
"""

from .config import Config
from .database import Database, ensure_schema, utc_now
from .logging_service import LoggingService, db_log

__all__ = ['Config', 'Database', 'ensure_schema', 'utc_now', 'LoggingService', 'db_log']
