"""
Tests for authentication endpoints.
"""

from datetime import timedelta

import pytest
from sqlalchemy import select, update

from rest_api.models import AuthSession, Credential
from rest_api.services.domain.auth_service import AuthService, purge_stale_sessions
from shared.security.rate_limit import limiter
from shared.utils.exceptions import AuthenticationError
from shared.security.password import hash_password, needs_rehash, verify_password
from shared.utils.clock import utcnow
from tests.helpers import TEST_PASSWORD, login


class TestPasswordHashing:
    """Test password hashing utilities."""

    def test_hash_password_returns_bcrypt_hash(self):
        """Hash should return bcrypt format."""
        hashed = hash_password("mypassword")
        assert hashed.startswith("$2b$")

    def test_verify_password_correct(self):
        """Correct password should verify."""
        hashed = hash_password("mypassword")
        assert verify_password("mypassword", hashed) is True

    def test_verify_password_incorrect(self):
        """Incorrect password should not verify."""
        hashed = hash_password("mypassword")
        assert verify_password("wrongpassword", hashed) is False

    def test_verify_password_rejects_plain_text(self):
        """Stored plain text never verifies."""
        assert verify_password("plaintext", "plaintext") is False

    def test_needs_rehash_plain_text(self):
        """Plain text passwords need rehashing."""
        assert needs_rehash("plaintext") is True

    def test_needs_rehash_bcrypt(self):
        """Hashes with the configured cost don't need rehashing."""
        hashed = hash_password("mypassword")
        assert needs_rehash(hashed) is False


class TestLogin:
    """Test POST /api/auth/login."""

    def test_login_success(self, client, restaurant_admin, restaurant):
        """Valid credentials return a token, user info and the session cookie."""
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["username"] == "admin"
        assert data["user"]["role"] == "restaurant_admin"
        assert data["user"]["restaurant_id"] == restaurant.id
        assert "auth_session" in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_login_stores_session(self, client, db_session, restaurant_admin):
        """Each login opens a server-side session."""
        login(client, "admin")
        login(client, "admin")
        sessions = db_session.scalars(
            select(AuthSession).where(AuthSession.user_id == restaurant_admin.id)
        ).all()
        assert len(sessions) == 2
        assert all(s.revoked_at is None for s in sessions)

    def test_login_unknown_user(self, client, restaurant_admin):
        """Unknown username should fail with a generic message."""
        response = client.post(
            "/api/auth/login",
            json={"username": "nobody", "password": TEST_PASSWORD},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    def test_login_wrong_password_counts_attempt(self, client, db_session, restaurant_admin):
        """Wrong password fails and increments failed_attempts."""
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": "wrong"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"
        db_session.expire_all()
        assert restaurant_admin.credential.failed_attempts == 1

    def test_login_inactive_user(self, client, db_session, restaurant_admin):
        """Inactive users cannot log in."""
        restaurant_admin.is_active = False
        db_session.commit()
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": TEST_PASSWORD},
        )
        assert response.status_code == 401

    def test_lockout_after_five_failures(self, client, db_session, restaurant_admin):
        """The fifth wrong password locks the account."""
        for _ in range(4):
            response = client.post(
                "/api/auth/login",
                json={"username": "admin", "password": "wrong"},
            )
            assert response.status_code == 401

        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": "wrong"},
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Account locked for security"

        db_session.expire_all()
        credential = restaurant_admin.credential
        assert credential.is_locked is True
        assert credential.failed_attempts == 5

    def test_locked_account_rejects_correct_password(self, client, db_session, restaurant_admin):
        """A locked account stays locked even with the right password."""
        restaurant_admin.credential.is_locked = True
        db_session.commit()
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": TEST_PASSWORD},
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Account is locked. Contact support."

    def test_success_resets_failed_attempts(self, client, db_session, restaurant_admin):
        """A successful login clears the failure counter and sets last_login."""
        restaurant_admin.credential.failed_attempts = 3
        db_session.commit()
        login(client, "admin")
        db_session.expire_all()
        assert restaurant_admin.credential.failed_attempts == 0
        assert restaurant_admin.credential.last_login is not None


class TestSession:
    """Test session endpoints."""

    def test_me_authenticated(self, client, admin_headers):
        """Authenticated user can access /me endpoint."""
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["username"] == "admin"

    def test_me_unauthenticated(self, client):
        """Unauthenticated request should fail."""
        response = client.get("/api/auth/me")
        assert response.status_code == 401

    def test_me_with_cookie(self, client, restaurant_admin):
        """The session cookie alone authenticates."""
        client.post("/api/auth/login", json={"username": "admin", "password": TEST_PASSWORD})
        response = client.get("/api/auth/me")
        assert response.status_code == 200
        client.cookies.clear()

    def test_me_invalid_token(self, client):
        """A garbage token is rejected."""
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_check_without_session(self, client):
        """/check reports unauthenticated instead of failing."""
        response = client.get("/api/auth/check")
        assert response.status_code == 200
        assert response.json() == {"authenticated": False, "user": None}

    def test_check_with_session(self, client, admin_headers):
        """/check returns the user for a valid session."""
        response = client.get("/api/auth/check", headers=admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is True
        assert data["user"]["username"] == "admin"

    def test_logout_revokes_session(self, client, admin_headers):
        """After logout the same token is refused."""
        response = client.post("/api/auth/logout", headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401

    def test_expired_session_rejected(self, client, db_session, admin_headers):
        """A session past its expiry is refused."""
        session = db_session.scalars(select(AuthSession)).one()
        session.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 401

    def test_deactivated_user_session_rejected(self, client, db_session, restaurant_admin, admin_headers):
        """Deactivating a user ends the use of their token."""
        restaurant_admin.is_active = False
        db_session.commit()
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401


class TestPasswordReset:
    """Test the password reset flow."""

    def test_request_unknown_email_same_answer(self, client):
        """Unknown emails get the generic answer and no token."""
        response = client.post(
            "/api/auth/password-reset/request",
            json={"email": "ghost@test.com"},
        )
        assert response.status_code == 200
        assert response.json()["reset_token"] is None

    def test_full_reset_flow(self, client, db_session, restaurant_admin, admin_headers):
        """Reset token sets a new password, unlocks and ends old sessions."""
        restaurant_admin.credential.is_locked = True
        restaurant_admin.credential.failed_attempts = 5
        db_session.commit()

        response = client.post(
            "/api/auth/password-reset/request",
            json={"email": "admin@test.com"},
        )
        assert response.status_code == 200
        token = response.json()["reset_token"]
        assert token

        response = client.post(
            "/api/auth/password-reset/confirm",
            json={"token": token, "new_password": "brandnew1"},
        )
        assert response.status_code == 200

        assert client.get("/api/auth/me", headers=admin_headers).status_code == 401
        login(client, "admin", "brandnew1")

        db_session.expire_all()
        credential = restaurant_admin.credential
        assert credential.is_locked is False
        assert credential.reset_token is None

    def test_token_is_single_use(self, client, restaurant_admin):
        """A used reset token cannot be used again."""
        token = client.post(
            "/api/auth/password-reset/request",
            json={"email": "admin@test.com"},
        ).json()["reset_token"]
        first = client.post(
            "/api/auth/password-reset/confirm",
            json={"token": token, "new_password": "brandnew1"},
        )
        assert first.status_code == 200
        second = client.post(
            "/api/auth/password-reset/confirm",
            json={"token": token, "new_password": "another1"},
        )
        assert second.status_code == 400
        assert second.json()["detail"] == "Invalid or expired reset token"

    def test_expired_token_rejected(self, client, db_session, restaurant_admin):
        """Expired reset tokens are refused and cleared."""
        credential = db_session.scalars(
            select(Credential).where(Credential.user_id == restaurant_admin.id)
        ).one()
        credential.reset_token = "expired-token"
        credential.reset_token_expires = utcnow() - timedelta(minutes=1)
        db_session.commit()

        response = client.post(
            "/api/auth/password-reset/confirm",
            json={"token": "expired-token", "new_password": "brandnew1"},
        )
        assert response.status_code == 400
        db_session.expire_all()
        assert credential.reset_token is None

    def test_short_password_rejected(self, client, restaurant_admin):
        """New passwords must meet the minimum length."""
        token = client.post(
            "/api/auth/password-reset/request",
            json={"email": "admin@test.com"},
        ).json()["reset_token"]
        response = client.post(
            "/api/auth/password-reset/confirm",
            json={"token": token, "new_password": "abc"},
        )
        assert response.status_code == 400


class TestChangePassword:
    """Test POST /api/auth/change-password."""

    def test_change_password(self, client, admin_headers):
        """The current session survives, other sessions end."""
        other_headers = login(client, "admin")
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": TEST_PASSWORD, "new_password": "changed123"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert client.get("/api/auth/me", headers=admin_headers).status_code == 200
        assert client.get("/api/auth/me", headers=other_headers).status_code == 401
        login(client, "admin", "changed123")

    def test_wrong_current_password(self, client, admin_headers):
        """Wrong current password is a 400."""
        response = client.post(
            "/api/auth/change-password",
            json={"current_password": "nope", "new_password": "changed123"},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"


class TestFailedAttemptCounter:
    """Failed logins are counted in the database, not on a stale copy."""

    def test_increment_uses_stored_value(self, db_session, restaurant_admin):
        """A failure recorded elsewhere in the meantime is not overwritten."""
        credential = restaurant_admin.credential
        assert credential.failed_attempts == 0
        # Another request counted two failures; this copy still says 0
        db_session.execute(
            update(Credential)
            .where(Credential.id == credential.id)
            .values(failed_attempts=2)
            .execution_options(synchronize_session=False)
        )

        with pytest.raises(AuthenticationError):
            AuthService(db_session).authenticate("admin", "wrong")

        db_session.expire_all()
        assert restaurant_admin.credential.failed_attempts == 3


class TestInactiveRestaurant:
    """Staff of a deleted restaurant are locked out."""

    def test_login_refused(self, client, db_session, restaurant, restaurant_admin):
        """The right password on a deleted restaurant is a 403."""
        restaurant.is_active = False
        db_session.commit()
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": TEST_PASSWORD},
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Restaurant is inactive"
        assert db_session.scalars(select(AuthSession)).all() == []

    def test_wrong_password_still_401(self, client, db_session, restaurant, restaurant_admin):
        """The restaurant state is not revealed without the password."""
        restaurant.is_active = False
        db_session.commit()
        response = client.post(
            "/api/auth/login",
            json={"username": "admin", "password": "wrong"},
        )
        assert response.status_code == 401

    def test_existing_session_refused(self, client, db_session, restaurant, admin_headers):
        """Sessions opened before the deletion stop working."""
        restaurant.is_active = False
        db_session.commit()
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Restaurant is inactive"

    def test_root_admin_unaffected(self, client, db_session, restaurant, root_headers):
        """Root admins have no restaurant and keep working."""
        restaurant.is_active = False
        db_session.commit()
        assert client.get("/api/auth/me", headers=root_headers).status_code == 200

    def test_writes_into_deleted_restaurant_not_found(self, client, db_session, restaurant, root_headers):
        """Creating under a deleted restaurant answers 404."""
        restaurant.is_active = False
        db_session.commit()
        response = client.post(
            f"/api/restaurants/{restaurant.id}/branches",
            json={"name": "Fantasma", "address": "Nada 0"},
            headers=root_headers,
        )
        assert response.status_code == 404

    def test_entity_routes_of_deleted_restaurant_not_found(self, client, db_session, restaurant, main_branch, root_headers):
        """Entities of a deleted restaurant cannot be read or edited by ID."""
        restaurant.is_active = False
        db_session.commit()
        assert client.get(f"/api/branches/{main_branch.id}", headers=root_headers).status_code == 404
        response = client.put(
            f"/api/branches/{main_branch.id}",
            json={"name": "X", "address": "Y"},
            headers=root_headers,
        )
        assert response.status_code == 404


class TestStaleSessions:
    """Expired and revoked session rows are deleted."""

    def test_login_purges_own_dead_sessions(self, client, db_session, restaurant_admin, admin_headers):
        """Logging in again removes the user's revoked sessions."""
        client.post("/api/auth/logout", headers=admin_headers)
        assert db_session.scalars(select(AuthSession)).one().revoked_at is not None

        login(client, "admin")
        db_session.expire_all()
        sessions = db_session.scalars(select(AuthSession)).all()
        assert len(sessions) == 1
        assert sessions[0].revoked_at is None

    def test_purge_keeps_live_sessions(self, client, db_session, restaurant_admin, root_admin):
        """Only expired or revoked rows go, for every user when none is given."""
        login(client, "admin")
        login(client, "root")
        expired = db_session.scalars(
            select(AuthSession).where(AuthSession.user_id == root_admin.id)
        ).one()
        expired.expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert purge_stale_sessions(db_session) == 1
        db_session.commit()
        remaining = db_session.scalars(select(AuthSession)).all()
        assert [s.user_id for s in remaining] == [restaurant_admin.id]


@pytest.fixture
def enabled_limiter():
    limiter.reset()
    limiter.enabled = True
    try:
        yield limiter
    finally:
        limiter.enabled = False
        limiter.reset()


class TestLoginRateLimit:
    """Login attempts are limited per client address."""

    def test_sixth_attempt_in_a_minute_is_429(self, client, enabled_limiter):
        """After five attempts the login answers 429 with Retry-After."""
        for _ in range(5):
            response = client.post(
                "/api/auth/login",
                json={"username": "nobody", "password": "wrong"},
            )
            assert response.status_code == 401

        response = client.post(
            "/api/auth/login",
            json={"username": "nobody", "password": "wrong"},
        )
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
