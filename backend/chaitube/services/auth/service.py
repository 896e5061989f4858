# chaitube/services/auth/service.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from chaitube.core.security import password_hasher
from chaitube.models.user import User
from chaitube.repositories.user import UserRepository
from chaitube.services._shared.base import BaseService
from chaitube.services._shared.errors import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
)
from chaitube.services._shared.ports.token_provider import TokenProvider
from chaitube.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    RefreshIn,
    TokenPairOut,
)
from chaitube.services.identity.dto import UserPublicOut

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_digest() -> str:
    """Digest verified against when the handle is unknown, to even out timing."""
    return password_hasher.hash("not-a-real-password")


class AuthService(BaseService):
    """
    Session lifecycle service (login / refresh / logout / verify).

    Each principal holds at most one live refresh token, stored on the user
    row. Rotation is a compare-and-swap on that column: a refresh token can
    be exchanged exactly once, and any replay of a rotated token is rejected.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        token_cfg: AuthTokenConfig,
        session=None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/decoding JWTs.
        :param token_cfg: Access/Refresh expiry configuration.
        :param session: Optional explicit SQLAlchemy session.
        """
        super().__init__(session=session)
        self.tokens = token_provider
        self.cfg = token_cfg

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        The new refresh token replaces any previous one, so a login ends
        every earlier session of the same principal.

        :param dto: Login input.
        :returns: Public user and the issued token pair.
        :raises ValidationError: If neither username nor email is given.
        :raises InvalidCredentialsError: If the handle is unknown or the
            password does not match (indistinguishable to the caller).
        """
        if not (dto.username or "").strip() and not (dto.email or "").strip():
            raise ValidationError("username or email is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.find_by_handle(username=dto.username, email=dto.email)
            if user is None:
                password_hasher.verify(dto.password or "", _dummy_digest())
                log.info("auth.login.failed", extra={"reason": "unknown_handle"})
                raise InvalidCredentialsError()
            if not user.verify_password(dto.password or ""):
                log.info("auth.login.failed", extra={"user_id": user.id, "reason": "bad_password"})
                raise InvalidCredentialsError()

            pair = self._issue_pair(user)
            repo.set_refresh_token(user.id, pair.refresh_token)
            out = LoginOut(user=UserPublicOut.from_model(user), tokens=pair)

        log.info("auth.login.succeeded", extra={"user_id": out.user.id})
        return out

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - Requires a validly signed, unexpired refresh token.
        - The presented token must equal the one stored for its subject;
          the swap to the new token is a single conditional ``UPDATE``,
          so two concurrent rotations of the same token cannot both win.
        - A replayed (already rotated) or revoked token fails exactly like a
          malformed one; the reason is only logged.

        :param dto: Refresh input.
        :returns: New access/refresh pair.
        :raises AuthenticationError: If no token was presented.
        :raises InvalidTokenError: For any verification or rotation failure.
        """
        presented = dto.refresh_token
        if not presented:
            raise AuthenticationError()

        claims = self.tokens.decode_refresh_token(presented)
        user_id = self._coerce_user_id(claims)

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get(user_id)
            if user is None:
                log.warning("auth.refresh.rejected", extra={"reason": "unknown_subject"})
                raise InvalidTokenError()

            stored = user.refresh_token
            pair = self._issue_pair(user)
            if not repo.swap_refresh_token(user.id, expected=presented, new=pair.refresh_token):
                reason = "revoked" if stored is None else "reused"
                log.warning("auth.refresh.rejected", extra={"user_id": user.id, "reason": reason})
                raise InvalidTokenError()

        log.info("auth.refresh.rotated", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: int) -> None:
        """
        Drop the stored refresh token. Idempotent.

        Access tokens already issued stay valid until they expire.
        """
        with self.rw_uow() as uow:
            uow.users.clear_refresh_token(user_id)
        log.info("auth.logout", extra={"user_id": user_id})

    # ------------------------------------------------------------------ #
    # Access token verification
    # ------------------------------------------------------------------ #

    def authenticate_access_token(self, token: str | None) -> UserPublicOut:
        """
        Resolve an access token to the public projection of its principal.

        :param token: Encoded access JWT as read from cookie or header.
        :returns: Public user.
        :raises AuthenticationError: If no token was presented.
        :raises InvalidTokenError: If the token does not verify or its
            principal no longer exists.
        """
        if not token:
            raise AuthenticationError()

        claims = self.tokens.decode_access_token(token)
        user_id = self._coerce_user_id(claims)

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                log.info("auth.access.rejected", extra={"reason": "unknown_subject"})
                raise InvalidTokenError()
            return UserPublicOut.from_model(user)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: User) -> TokenPairOut:
        claims: dict[str, Any] = {
            "username": user.username,
            "email": user.email,
            "full_name": user.full_name,
        }
        access = self.tokens.create_access_token(
            identity=user.id,
            additional_claims=claims,
            expires_delta=self.cfg.access_expires,
        )
        refresh = self.tokens.create_refresh_token(
            identity=user.id,
            expires_delta=self.cfg.refresh_expires,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh)

    @staticmethod
    def _coerce_user_id(claims: dict[str, Any]) -> int:
        """Ensure the JWT subject can be treated as an integer user id."""
        subject = claims.get("sub")
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise InvalidTokenError()
