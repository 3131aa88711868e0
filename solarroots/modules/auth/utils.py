import hashlib
import hmac
import re

from werkzeug.security import generate_password_hash, check_password_hash

# Digests written before salted hashes were introduced: bare hex SHA-256
_LEGACY_DIGEST = re.compile(r'^[0-9a-f]{64}$')


def sha256_hex(value):
    """Hex SHA-256 of a string"""
    return hashlib.sha256(value.encode('utf-8')).hexdigest()


def hash_password(password):
    """Salted one-way digest for storing a member password"""
    return generate_password_hash(password)


def verify_password(password, password_hash):
    """
    Verify a password against a stored digest in constant time.
    Accepts Werkzeug salted hashes and legacy unsalted SHA-256 hex digests.
    """
    if not password_hash:
        return False
    if _LEGACY_DIGEST.match(password_hash):
        return hmac.compare_digest(sha256_hex(password), password_hash)
    return check_password_hash(password_hash, password)


def secrets_match(submitted, expected):
    """Constant-time equality for two strings"""
    return hmac.compare_digest(submitted.encode('utf-8'), expected.encode('utf-8'))
