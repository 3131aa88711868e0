"""
Solar Roots Auth Module

Provides:
- Admin login against a single env-configured credential
- Password digest helpers shared with member login
"""

from .routes import admin_bp
from .utils import hash_password, verify_password, sha256_hex

__all__ = ['admin_bp', 'hash_password', 'verify_password', 'sha256_hex']
