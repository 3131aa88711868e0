"""
Shared fixtures for the Solar Roots test suite.

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import sqlite3
import tempfile
from unittest.mock import patch, MagicMock

import pytest

from solarroots import create_app


@pytest.fixture
def tmp_dir():
    """Create a temporary directory for the test database, cleaned up after."""
    d = tempfile.mkdtemp(prefix="solarroots-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def static_dir(tmp_dir):
    """A tiny static site served by the fall-through handler."""
    folder = os.path.join(tmp_dir, "public")
    os.makedirs(os.path.join(folder, "about"))
    with open(os.path.join(folder, "index.html"), "w") as fh:
        fh.write("<h1>Solar Roots</h1>")
    with open(os.path.join(folder, "styles.css"), "w") as fh:
        fh.write("body { color: green; }")
    with open(os.path.join(folder, "about", "index.html"), "w") as fh:
        fh.write("<h1>About the cooperative</h1>")
    return folder


@pytest.fixture
def app(tmp_dir, static_dir):
    """Flask app backed by a temp database, MailChannels provider, no admin."""
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SOLARROOTS_DB": os.path.join(tmp_dir, "solarroots.db"),
        "STATIC_FOLDER": static_dir,
        "SITE_BASE_URL": "https://solarroots.example.com",
        "EMAIL_PROVIDER": "",
        "SENDGRID_API_KEY": None,
        "MAILCHANNELS_DOMAIN": None,
        "MAILCHANNELS_SUBDOMAIN": None,
        "MAILCHANNELS_API_KEY": None,
        "MAIL_FROM_EMAIL": "noreply@solarroots.example.com",
        "MAIL_FROM_NAME": "Solar Roots",
        "EMAIL_BRAND_NAME": "Solar Roots",
        "ADMIN_EMAIL": None,
        "ADMIN_PASSWORD": None,
        "ADMIN_PASSWORD_HASH": None,
    })
    yield app
    app.extensions["email_service"].shutdown()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def email_service(app):
    return app.extensions["email_service"]


@pytest.fixture
def mock_post():
    """Patch the HTTP call made by the email providers."""
    response = MagicMock(ok=True, status_code=202, text="")
    with patch("solarroots.modules.email.providers.requests.post", return_value=response) as post:
        yield post


def query(app, sql, params=()):
    """Run a read query directly against the app's database."""
    conn = sqlite3.connect(app.config["SOLARROOTS_DB"])
    conn.row_factory = sqlite3.Row
    try:
        return [dict(row) for row in conn.execute(sql, params).fetchall()]
    finally:
        conn.close()


def seed_subscription(app, email, confirmed=False, token="seed-token"):
    """Insert a subscription row, bootstrapping the schema first."""
    from solarroots.core.database import Database, utc_now

    with app.app_context():
        with Database.connection() as conn:
            now = utc_now()
            conn.execute("""
                INSERT INTO subscriptions (email, created_at, updated_at, confirmed,
                                           confirmation_token, token_created_at)
                VALUES (?, ?, ?, ?, ?, ?)
            """, (email, now, now, 1 if confirmed else 0, None if confirmed else token, now))
