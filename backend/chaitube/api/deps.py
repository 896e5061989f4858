"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, g, jsonify, request

from chaitube.core.config import PLACEHOLDER_SECRET_PREFIX
from chaitube.infra.jwt.pyjwt_token_provider import JWTTokenProvider
from chaitube.infra.media.local_media_store import LocalMediaStore
from chaitube.services._shared.ports.media_store import MediaStore, MediaUpload
from chaitube.services.auth.dto import AuthTokenConfig, TokenPairOut
from chaitube.services.auth.service import AuthService
from chaitube.services.identity.dto import UserPublicOut
from chaitube.services.identity.service import IdentityService
from chaitube.services.subscriptions.service import SubscriptionService

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

_TOKEN_CONFIG_KEY = "chaitube.token_config"
_MEDIA_STORE_KEY = "chaitube.media_store"


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


def init_app(app: Flask) -> None:
    """Validate token settings and attach the media store to ``app``.

    Token configuration is checked here so a bad deployment (missing or
    identical secrets) fails at startup instead of on the first login.
    The ``CHANGE_ME`` development fallbacks are refused unless the app runs
    in debug or testing mode. A media store already present in
    ``app.extensions`` is left in place.
    """

    token_cfg = AuthTokenConfig.from_mapping(app.config)
    if not (app.debug or app.testing) and any(
        secret.startswith(PLACEHOLDER_SECRET_PREFIX)
        for secret in (token_cfg.access_secret, token_cfg.refresh_secret)
    ):
        raise ValueError("Token secrets must be supplied through the environment.")
    app.extensions[_TOKEN_CONFIG_KEY] = token_cfg
    app.extensions.setdefault(
        _MEDIA_STORE_KEY,
        LocalMediaStore(
            app.config.get("MEDIA_ROOT", "./media"),
            url_prefix=app.config.get("MEDIA_URL_PREFIX", "/media"),
        ),
    )


def set_media_store(app: Flask, store: MediaStore) -> None:
    """Replace the media store used by request handlers."""

    app.extensions[_MEDIA_STORE_KEY] = store


def get_token_config() -> AuthTokenConfig:
    return cast(AuthTokenConfig, current_app.extensions[_TOKEN_CONFIG_KEY])


def get_auth_service() -> AuthService:
    """Build the auth service for the current request."""

    cfg = get_token_config()
    return AuthService(token_provider=JWTTokenProvider(cfg), token_cfg=cfg)


def get_identity_service() -> IdentityService:
    """Build the identity service for the current request."""

    return IdentityService(
        media_store=cast(MediaStore, current_app.extensions[_MEDIA_STORE_KEY]),
        require_avatar=bool(current_app.config.get("AUTH_REQUIRE_AVATAR", True)),
    )


def get_subscription_service() -> SubscriptionService:
    return SubscriptionService()


# ---------------------------------------------------------------------------
# Token transport
# ---------------------------------------------------------------------------


def read_access_token() -> str | None:
    """Return the access token from the cookie, else from ``Authorization: Bearer``."""

    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def read_refresh_token(body_token: str | None) -> str | None:
    """Return the refresh token from the cookie, else the one from the body."""

    return request.cookies.get(REFRESH_COOKIE) or body_token or None


def _cookie_options() -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("AUTH_COOKIE_SECURE", True)),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE", "Lax"),
        "path": "/",
    }


def set_token_cookies(response: Response, pair: TokenPairOut) -> Response:
    """Attach both tokens as HttpOnly cookies living as long as the tokens."""

    cfg = get_token_config()
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=int(cfg.access_expires.total_seconds()),
        **options,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=int(cfg.refresh_expires.total_seconds()),
        **options,
    )
    return response


def clear_token_cookies(response: Response) -> Response:
    options = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


# ---------------------------------------------------------------------------
# Auth & uploads
# ---------------------------------------------------------------------------


def require_auth(func: F) -> F:
    """Resolve the access token to a user and expose it as ``g.current_user``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = get_auth_service().authenticate_access_token(read_access_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user() -> UserPublicOut:
    """Return the principal set by :func:`require_auth`."""

    return cast(UserPublicOut, g.current_user)


def read_upload(field: str) -> MediaUpload | None:
    """Return the multipart file ``field`` as a :class:`MediaUpload`, if sent."""

    storage = request.files.get(field)
    if storage is None or not storage.filename:
        return None
    return MediaUpload(
        stream=storage.stream,
        filename=storage.filename,
        content_type=storage.mimetype,
    )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
