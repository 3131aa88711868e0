"""
Request helpers shared by the API blueprints: JSON body parsing,
email validation and the {success, ...} response envelope.
"""

import re
import logging

from flask import request, jsonify

# Something@something.tld with no whitespace and exactly one @
EMAIL_REGEX = re.compile(r'[^\s@]+@[^\s@]+\.[^\s@]+')

logger = logging.getLogger(__name__)


def normalize_email(email):
    """Trim and lowercase an email address; non-strings become ''"""
    if not isinstance(email, str):
        return ''
    return email.strip().lower()


def validate_email(email):
    """Validate email format"""
    if not email:
        return False
    return EMAIL_REGEX.fullmatch(email) is not None


def get_json_object():
    """
    Parse the request body as a JSON object.

    Returns:
        dict, or None when the body is not valid JSON or not an object
    """
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        logger.info(f"Rejected non-object JSON body on {request.path}")
        return None
    return data


def get_text(data, key):
    """Return a trimmed string field, or '' if missing or not a string"""
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ''


def json_error(message, status):
    return jsonify({'success': False, 'error': message}), status


def json_success(message, status=200, **extra):
    body = {'success': True}
    body.update(extra)
    body['message'] = message
    return jsonify(body), status


def internal_error():
    return json_error('Internal Server Error', 500)
