"""
Profile upsert and member login tests.
"""

import os

import pytest

from solarroots.modules.auth.utils import sha256_hex, verify_password

from conftest import query, seed_subscription

NO_ACCOUNT = (
    "We could not find an account with a password for that email. "
    "Please create or update your profile first."
)


def _profile(app, email):
    rows = query(app, "SELECT * FROM profiles WHERE email = ?", (email,))
    return rows[0] if rows else None


@pytest.fixture
def subscribed(app):
    seed_subscription(app, "user@example.com")
    return "user@example.com"


# ---------------------------------------------------------------------------
# Profile validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("body, error", [
    (["not", "an", "object"], "Invalid JSON body."),
    ({"email": "bad", "name": "A", "bio": "B", "password": "pw"}, "Invalid email address."),
    ({"email": "user@example.com", "name": "   ", "bio": "B"}, "Name is required."),
    ({"email": "user@example.com", "name": "A", "bio": ""}, "Bio is required."),
    ({"email": "user@example.com", "name": "A", "bio": "B", "password": 123}, "Password must be a string."),
])
def test_profile_validation_happens_before_storage(client, app, body, error):
    response = client.post("/api/profile", json=body)

    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": error}
    assert not os.path.exists(app.config["SOLARROOTS_DB"])


def test_profile_for_unknown_email_is_404(client, app):
    response = client.post("/api/profile", json={
        "email": "stranger@example.com", "name": "Solar Fan", "bio": "Hi", "password": "pw123456",
    })

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": "Email not found in subscriptions."}
    assert query(app, "SELECT * FROM profiles") == []


# ---------------------------------------------------------------------------
# Profile create / update
# ---------------------------------------------------------------------------

def test_profile_create_requires_password(client, app, subscribed):
    response = client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "Harnessing sunlight.",
    })

    assert response.status_code == 400
    assert response.get_json() == {"success": False, "error": "Password is required to create a profile."}
    assert _profile(app, subscribed) is None


def test_profile_create_stores_digest_not_plaintext(client, app, subscribed):
    response = client.post("/api/profile", json={
        "email": "User@Example.com", "name": " Solar Fan ", "bio": "Harnessing sunlight.",
        "password": "password123",
    })

    assert response.status_code == 200
    assert response.get_json() == {"success": True, "message": "Profile saved successfully."}

    profile = _profile(app, subscribed)
    assert profile["name"] == "Solar Fan"
    assert profile["bio"] == "Harnessing sunlight."
    assert profile["password_hash"] != "password123"
    assert "password123" not in profile["password_hash"]
    assert verify_password("password123", profile["password_hash"])
    assert profile["created_at"] == profile["updated_at"]


def test_profile_allowed_for_unconfirmed_subscription(client, app):
    seed_subscription(app, "pending@example.com", confirmed=False)

    response = client.post("/api/profile", json={
        "email": "pending@example.com", "name": "P", "bio": "Pending", "password": "pw",
    })

    assert response.status_code == 200


def test_profile_update_without_password_keeps_digest(client, app, subscribed):
    client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "First bio", "password": "password123",
    })
    before = _profile(app, subscribed)

    response = client.post("/api/profile", json={
        "email": subscribed, "name": "Sun Lover", "bio": "Second bio",
    })

    after = _profile(app, subscribed)
    assert response.status_code == 200
    assert after["id"] == before["id"]
    assert after["name"] == "Sun Lover"
    assert after["bio"] == "Second bio"
    assert after["password_hash"] == before["password_hash"]
    assert after["created_at"] == before["created_at"]
    assert after["updated_at"] >= before["updated_at"]


def test_profile_update_with_password_replaces_digest(client, app, subscribed):
    client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "Bio", "password": "old-password",
    })

    client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "Bio", "password": "new-password",
    })

    profile = _profile(app, subscribed)
    assert verify_password("new-password", profile["password_hash"])
    assert not verify_password("old-password", profile["password_hash"])
    assert len(query(app, "SELECT * FROM profiles")) == 1


# ---------------------------------------------------------------------------
# Member login
# ---------------------------------------------------------------------------

def test_login_validation(client):
    assert client.post("/api/login", json="nope").get_json()["error"] == "Invalid JSON body."
    assert client.post("/api/login", json={"email": "x", "password": "p"}).get_json()["error"] == \
        "Invalid email address."
    response = client.post("/api/login", json={"email": "user@example.com"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Password is required."


def test_login_without_profile_is_404(client):
    response = client.post("/api/login", json={"email": "user@example.com", "password": "password123"})

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "error": NO_ACCOUNT}


def test_login_with_profile_but_no_digest_is_404(client, app, subscribed):
    # Legacy profile rows predate the password column
    from solarroots.core.database import Database

    with app.app_context():
        with Database.connection() as conn:
            conn.execute("""
                INSERT INTO profiles (email, name, bio, created_at, updated_at)
                VALUES (?, 'Old', 'Row', 'then', 'then')
            """, (subscribed,))

    response = client.post("/api/login", json={"email": subscribed, "password": "anything"})

    assert response.status_code == 404
    assert response.get_json()["error"] == NO_ACCOUNT


def test_login_wrong_password_is_401(client, subscribed):
    client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "Bio", "password": "password123",
    })

    response = client.post("/api/login", json={"email": subscribed, "password": "wrong"})

    assert response.status_code == 401
    assert response.get_json() == {"success": False, "error": "Incorrect password. Please try again."}


def test_login_success(client, subscribed):
    client.post("/api/profile", json={
        "email": subscribed, "name": "Solar Fan", "bio": "Bio", "password": "password123",
    })

    response = client.post("/api/login", json={"email": "USER@example.com", "password": "password123"})

    assert response.status_code == 200
    assert response.get_json() == {"success": True, "message": "Login successful."}


def test_login_accepts_legacy_sha256_digest(client, app, subscribed):
    from solarroots.core.database import Database

    with app.app_context():
        with Database.connection() as conn:
            conn.execute("""
                INSERT INTO profiles (email, name, bio, password_hash, created_at, updated_at)
                VALUES (?, 'Old', 'Row', ?, 'then', 'then')
            """, (subscribed, sha256_hex("password123")))

    assert client.post("/api/login", json={
        "email": subscribed, "password": "password123"}).status_code == 200
    assert client.post("/api/login", json={
        "email": subscribed, "password": "nope"}).status_code == 401
