"""Unit tests for AuthService: login, rotation with reuse detection, logout."""

from __future__ import annotations

import logging
from datetime import timedelta

import pytest
from freezegun import freeze_time

from chaitube.infra.jwt.pyjwt_token_provider import JWTTokenProvider
from chaitube.models.user import User
from chaitube.services._shared.errors import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
)
from chaitube.services.auth.dto import AuthTokenConfig, LoginIn, LoginOut, RefreshIn
from chaitube.services.auth.service import AuthService
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

CFG = AuthTokenConfig(
    access_secret="svc-access-secret-0123456789abcdef",
    refresh_secret="svc-refresh-secret-0123456789abcdef",
)


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def service(session) -> AuthService:
    """AuthService wired to the real PyJWT provider and the test session."""
    return AuthService(token_provider=JWTTokenProvider(CFG), token_cfg=CFG)


@pytest.fixture()
def alice(session) -> User:
    return UserFactory(username="alice", email="alice@example.com")


def _stored_token(session, user_id: int) -> str | None:
    session.expire_all()
    return session.get(User, user_id).refresh_token


# -------------------------------- Login ----------------------------------- #
class TestLogin:
    @pytest.mark.parametrize(
        "handle",
        [{"username": "alice"}, {"email": "alice@example.com"}, {"username": "ALICE"}],
    )
    def test_login_issues_pair_and_stores_refresh_token(self, service, session, alice, handle):
        """
        GIVEN a registered user
        WHEN logging in by username or email (any case)
        THEN a token pair is issued and the refresh token becomes the stored one.
        """
        out = service.login(LoginIn(password=DEFAULT_PASSWORD, **handle))

        assert isinstance(out, LoginOut)
        assert out.user.id == alice.id
        assert out.user.username == "alice"
        assert _stored_token(session, alice.id) == out.tokens.refresh_token

        claims = service.tokens.decode_access_token(out.tokens.access_token)
        assert claims["sub"] == str(alice.id)
        assert claims["username"] == "alice"
        assert claims["email"] == "alice@example.com"

    def test_unknown_user_and_wrong_password_look_identical(self, service, alice):
        """
        GIVEN an unknown handle and a known handle with a wrong password
        WHEN both log in
        THEN both fail with the same error type and message.
        """
        with pytest.raises(InvalidCredentialsError) as unknown:
            service.login(LoginIn(username="nobody", password=DEFAULT_PASSWORD))
        with pytest.raises(InvalidCredentialsError) as wrong:
            service.login(LoginIn(username="alice", password="not-the-password"))

        assert str(unknown.value) == str(wrong.value) == "Invalid user credentials"

    def test_failed_login_keeps_the_current_session(self, service, session, alice):
        first = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(username="alice", password="wrong-password"))

        assert _stored_token(session, alice.id) == first.tokens.refresh_token

    @pytest.mark.parametrize("handle", [{}, {"username": "  "}, {"email": ""}])
    def test_handle_is_required(self, service, handle):
        with pytest.raises(ValidationError):
            service.login(LoginIn(password="whatever", **handle))

    def test_second_login_replaces_previous_session(self, service, alice):
        """
        GIVEN two logins of the same user
        WHEN the first refresh token is presented
        THEN it is rejected, since only the latest one is stored.
        """
        first = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        second = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

        with pytest.raises(InvalidTokenError):
            service.refresh(RefreshIn(refresh_token=first.tokens.refresh_token))
        assert service.refresh(RefreshIn(refresh_token=second.tokens.refresh_token))


# ------------------------------- Refresh ---------------------------------- #
class TestRefresh:
    def test_refresh_rotates(self, service, session, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

        pair = service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))

        assert pair.refresh_token != login.tokens.refresh_token
        assert pair.access_token != login.tokens.access_token
        assert _stored_token(session, alice.id) == pair.refresh_token

    def test_replayed_token_is_rejected_and_logged(self, service, session, alice, caplog):
        """
        GIVEN a refresh token that has already been rotated
        WHEN it is presented again
        THEN the call fails like any invalid token, the reuse is logged,
        and the session holding the newer token keeps working.
        """
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        rotated = service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))

        with caplog.at_level(logging.WARNING), pytest.raises(InvalidTokenError) as err:
            service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))

        assert str(err.value) == "Invalid or expired token"
        rejected = [r for r in caplog.records if r.getMessage() == "auth.refresh.rejected"]
        assert rejected and rejected[-1].reason == "reused"
        assert _stored_token(session, alice.id) == rotated.refresh_token
        assert service.refresh(RefreshIn(refresh_token=rotated.refresh_token))

    def test_second_rotation_of_same_token_loses(self, service, alice):
        """
        GIVEN one refresh token presented twice
        WHEN both rotations run
        THEN exactly one yields a new pair.
        """
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        token = login.tokens.refresh_token

        outcomes = []
        for _ in range(2):
            try:
                outcomes.append(service.refresh(RefreshIn(refresh_token=token)))
            except InvalidTokenError:
                outcomes.append(None)

        assert sum(1 for o in outcomes if o is not None) == 1

    def test_missing_token_is_unauthorized(self, service):
        with pytest.raises(AuthenticationError) as err:
            service.refresh(RefreshIn(refresh_token=None))
        assert type(err.value) is AuthenticationError

    def test_access_token_cannot_refresh(self, service, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        with pytest.raises(InvalidTokenError):
            service.refresh(RefreshIn(refresh_token=login.tokens.access_token))

    def test_token_of_deleted_user_is_rejected(self, service, session, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        session.delete(session.get(User, alice.id))
        session.flush()

        with pytest.raises(InvalidTokenError):
            service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))

    def test_expired_refresh_token_is_rejected(self, service, alice):
        with freeze_time("2026-01-01 12:00:00") as frozen:
            login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
            frozen.tick(delta=CFG.refresh_expires + timedelta(seconds=1))
            with pytest.raises(InvalidTokenError):
                service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))


# ------------------------------- Logout ----------------------------------- #
class TestLogout:
    def test_logout_revokes_refresh_token(self, service, session, alice, caplog):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

        service.logout(alice.id)

        assert _stored_token(session, alice.id) is None
        with caplog.at_level(logging.WARNING), pytest.raises(InvalidTokenError):
            service.refresh(RefreshIn(refresh_token=login.tokens.refresh_token))
        rejected = [r for r in caplog.records if r.getMessage() == "auth.refresh.rejected"]
        assert rejected[-1].reason == "revoked"

    def test_logout_is_idempotent(self, service, session, alice):
        service.logout(alice.id)
        service.logout(alice.id)
        assert _stored_token(session, alice.id) is None

    def test_access_token_survives_logout_until_expiry(self, service, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        service.logout(alice.id)
        assert service.authenticate_access_token(login.tokens.access_token).id == alice.id


# ------------------------- Access verification ---------------------------- #
class TestAuthenticateAccessToken:
    def test_resolves_public_user(self, service, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

        user = service.authenticate_access_token(login.tokens.access_token)

        assert user.id == alice.id
        assert not hasattr(user, "password_hash")
        assert not hasattr(user, "refresh_token")

    def test_missing_token(self, service):
        with pytest.raises(AuthenticationError):
            service.authenticate_access_token(None)

    def test_expired_token(self, service, alice):
        with freeze_time("2026-01-01 12:00:00") as frozen:
            login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
            frozen.tick(delta=CFG.access_expires)
            with pytest.raises(InvalidTokenError):
                service.authenticate_access_token(login.tokens.access_token)

    def test_refresh_token_is_not_accepted_as_access(self, service, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        with pytest.raises(InvalidTokenError):
            service.authenticate_access_token(login.tokens.refresh_token)

    def test_deleted_principal(self, service, session, alice):
        login = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
        session.delete(session.get(User, alice.id))
        session.flush()
        with pytest.raises(InvalidTokenError):
            service.authenticate_access_token(login.tokens.access_token)
