"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories, domain
models, and application services.

The translation to HTTP responses (RFC 7807) is handled by
``chaitube/core/errors.py`` via :func:`chaitube.services._shared.base.translate_service_error`.

Credential failures deliberately carry fixed messages: the client must not be
able to distinguish "unknown user" from "wrong password", nor "expired" from
"revoked" tokens. Specific reasons are logged, never returned.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL includes the constraint name in the message; SQLite reports
    the columns instead (``UNIQUE constraint failed: users.email``), so the
    column suffix of the conventional ``uq_<table>_<column>`` name is
    matched as a fallback.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_") and "unique" in message:
        return name[3:].replace("_", ".", 1) in message
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer later translates them to ``APIError``.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Raised when a request is missing inputs or carries malformed ones."""

    def __init__(self, message: str = "Invalid input") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class AuthenticationError(ServiceError):
    """Raised when a protected operation is invoked without a token."""

    def __init__(self, message: str = "Unauthorized request") -> None:
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Unknown user or wrong password; both read the same."""

    MESSAGE = "Invalid user credentials"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class InvalidTokenError(AuthenticationError):
    """Token is malformed, expired, badly signed, revoked or reused."""

    MESSAGE = "Invalid or expired token"

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)


class MediaStoreError(ServiceError):
    """Raised when the external media store rejects an upload or delete.

    Rendered like :class:`InternalError`; the store message is only logged.
    """

    def __init__(self, message: str = "Media upload failed") -> None:
        super().__init__(message)


class InternalError(ServiceError):
    """Unexpected failure; only a generic message is ever exposed."""

    def __init__(self, message: str = "Something went wrong") -> None:
        super().__init__(message)
