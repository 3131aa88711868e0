"""
Profiles Routes
===============

Provides:
- POST /api/profile -- create or update a member profile for a subscribed email
- POST /api/login -- member login against the stored password digest
"""

import logging
import sqlite3

from solarroots.core.database import Database, utc_now
from solarroots.core.helpers import (
    get_json_object, get_text, normalize_email, validate_email,
    json_error, json_success, internal_error
)
from solarroots.core.logging_service import LoggingService, db_log
from solarroots.modules.auth.utils import hash_password, verify_password
from solarroots.modules.subscriptions.database import SubscriptionDatabase
from . import profiles_bp
from .database import ProfileDatabase

logger = logging.getLogger(__name__)

NO_ACCOUNT_MESSAGE = (
    'We could not find an account with a password for that email. '
    'Please create or update your profile first.'
)


@profiles_bp.route('/api/profile', methods=['POST'])
def save_profile():
    """Create or update the profile attached to a subscription"""
    data = get_json_object()
    if data is None:
        return json_error('Invalid JSON body.', 400)

    email = normalize_email(data.get('email'))
    if not validate_email(email):
        return json_error('Invalid email address.', 400)

    name = get_text(data, 'name')
    if not name:
        return json_error('Name is required.', 400)

    bio = get_text(data, 'bio')
    if not bio:
        return json_error('Bio is required.', 400)

    password = data.get('password')
    if password is not None and not isinstance(password, str):
        return json_error('Password must be a string.', 400)

    try:
        with Database.connection() as conn:
            if not SubscriptionDatabase.get_subscription(conn, email):
                return json_error('Email not found in subscriptions.', 404)

            existing = ProfileDatabase.get_profile(conn, email)
            now = utc_now()

            if password:
                ProfileDatabase.upsert_with_password(conn, email, name, bio, hash_password(password), now)
            elif existing:
                ProfileDatabase.upsert_keep_password(conn, email, name, bio, now)
            else:
                return json_error('Password is required to create a profile.', 400)

        action = 'updated' if existing else 'created'
        logger.info(f"Profile {action}: {email}")
        db_log('info', 'profiles', f'Profile {action}: {email}')
        return json_success('Profile saved successfully.')

    except sqlite3.Error as e:
        logger.error(f"Database error in save_profile: {e}")
        LoggingService.log_error_with_traceback('profiles', e, {'route': 'profile'})
        return internal_error()
    except Exception as e:
        logger.error(f"Error in save_profile: {e}")
        LoggingService.log_error_with_traceback('profiles', e, {'route': 'profile'})
        return internal_error()


@profiles_bp.route('/api/login', methods=['POST'])
def member_login():
    """Check a member's password against their profile digest"""
    data = get_json_object()
    if data is None:
        return json_error('Invalid JSON body.', 400)

    email = normalize_email(data.get('email'))
    if not validate_email(email):
        return json_error('Invalid email address.', 400)

    password = data.get('password')
    if not isinstance(password, str) or not password:
        return json_error('Password is required.', 400)

    try:
        with Database.connection() as conn:
            password_hash = ProfileDatabase.get_password_hash(conn, email)

        if not password_hash:
            return json_error(NO_ACCOUNT_MESSAGE, 404)

        if not verify_password(password, password_hash):
            logger.info(f"Incorrect password for member: {email}")
            return json_error('Incorrect password. Please try again.', 401)

        logger.info(f"Member login successful: {email}")
        return json_success('Login successful.')

    except Exception as e:
        logger.error(f"Error in member_login: {e}")
        LoggingService.log_error_with_traceback('profiles', e, {'route': 'login'})
        return internal_error()
