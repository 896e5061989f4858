# chaitube/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from chaitube.services._shared.errors import InternalError, InvalidTokenError
from chaitube.services._shared.ports import TokenProvider
from chaitube.services.auth.dto import AuthTokenConfig

log = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Claims owned by the provider; callers cannot override them.
_RESERVED_CLAIMS = ("sub", "type", "iat", "exp", "jti")
_REQUIRED_CLAIMS = ["sub", "type", "iat", "exp", "jti"]


@dataclass(slots=True)
class JWTTokenProvider(TokenProvider):
    """
    Adapter for PyJWT (HMAC-signed JWS).

    Access and refresh tokens are signed with the two distinct secrets of
    :class:`~chaitube.services.auth.dto.AuthTokenConfig` and tagged with a
    ``type`` claim; every token carries a random ``jti`` so two tokens minted
    in the same second never collide.

    :param cfg: Secrets, lifetimes and algorithm.
    :param leeway: Clock skew tolerance in seconds applied on decode.
    """

    cfg: AuthTokenConfig
    leeway: int = 0

    # ------------------------------ Issue ------------------------------

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return self._encode(
            identity=identity,
            token_type=ACCESS_TOKEN_TYPE,
            secret=self.cfg.access_secret,
            expires_delta=expires_delta or self.cfg.access_expires,
            additional_claims=additional_claims,
        )

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str:
        # Refresh tokens stay minimal: identity only, no profile claims.
        return self._encode(
            identity=identity,
            token_type=REFRESH_TOKEN_TYPE,
            secret=self.cfg.refresh_secret,
            expires_delta=expires_delta or self.cfg.refresh_expires,
        )

    # ------------------------------ Verify ------------------------------

    def decode_access_token(self, token: str) -> dict[str, Any]:
        return self._decode(token, secret=self.cfg.access_secret, token_type=ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> dict[str, Any]:
        return self._decode(token, secret=self.cfg.refresh_secret, token_type=REFRESH_TOKEN_TYPE)

    # ------------------------------ Internals ------------------------------

    def _encode(
        self,
        *,
        identity: int | str,
        token_type: str,
        secret: str,
        expires_delta: timedelta,
        additional_claims: dict[str, Any] | None = None,
    ) -> str:
        now = datetime.now(UTC)
        payload: dict[str, Any] = {
            k: v for k, v in (additional_claims or {}).items() if k not in _RESERVED_CLAIMS
        }
        payload.update(
            {
                "sub": str(identity),
                "type": token_type,
                "iat": now,
                "exp": now + expires_delta,
                "jti": uuid4().hex,
            }
        )
        try:
            return jwt.encode(payload, secret, algorithm=self.cfg.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as exc:
            log.error("token.sign_failed", extra={"reason": type(exc).__name__})
            raise InternalError() from exc

    def _decode(self, token: str, *, secret: str, token_type: str) -> dict[str, Any]:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError()
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                secret,
                algorithms=[self.cfg.algorithm],
                options={"require": _REQUIRED_CLAIMS},
                leeway=self.leeway,
            )
        except jwt.PyJWTError as exc:
            log.info("token.rejected", extra={"reason": type(exc).__name__})
            raise InvalidTokenError() from exc

        if claims.get("type") != token_type:
            log.info("token.rejected", extra={"reason": "wrong_type"})
            raise InvalidTokenError()
        return claims
