import logging

from flask import Blueprint, current_app

from solarroots.core.helpers import (
    get_json_object, normalize_email, json_error, json_success
)
from solarroots.core.logging_service import LoggingService
from .utils import sha256_hex, secrets_match

logger = logging.getLogger(__name__)

admin_bp = Blueprint('auth', __name__)


def get_admin_credentials():
    """
    Read the admin credential from app config.

    Returns:
        (email, password, password_hash) or None when admin access is not configured
    """
    email = normalize_email(current_app.config.get('ADMIN_EMAIL'))
    password = current_app.config.get('ADMIN_PASSWORD') or ''
    password_hash = (current_app.config.get('ADMIN_PASSWORD_HASH') or '').strip().lower()

    if not email or not (password or password_hash):
        return None
    return email, password, password_hash


def check_admin_password(submitted, password, password_hash):
    """Plaintext match when ADMIN_PASSWORD is set, digest match otherwise"""
    if password:
        return secrets_match(submitted, password)
    return secrets_match(sha256_hex(submitted), password_hash)


@admin_bp.route('/api/admin/login', methods=['POST'])
def admin_login():
    """Check submitted credentials against the configured admin account"""
    data = get_json_object()
    if data is None:
        return json_error('Invalid JSON body.', 400)

    credentials = get_admin_credentials()
    if credentials is None:
        logger.warning("Admin login attempted but admin access is not configured")
        return json_error('Admin access is not configured.', 503)

    email = normalize_email(data.get('email'))
    password = data.get('password')
    if not email or not isinstance(password, str) or not password:
        return json_error('Email and password are required.', 400)

    admin_email, admin_password, admin_password_hash = credentials
    email_ok = secrets_match(email, admin_email)
    password_ok = check_admin_password(password, admin_password, admin_password_hash)

    if not (email_ok and password_ok):
        LoggingService.log_security_event('Failed admin login', {'email': email})
        return json_error('Incorrect admin credentials.', 401)

    logger.info(f"Admin login successful: {email}")
    return json_success('Admin login successful.')
