# chaitube/services/_shared/base.py
from __future__ import annotations

from sqlalchemy.orm import Session

from chaitube.core import errors as api_errors
from chaitube.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from chaitube.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


def translate_service_error(exc: ServiceError) -> api_errors.APIError:
    """
    Map a domain/service-level error to its API-level (HTTP) counterpart.

    Credential errors keep their fixed messages; internal errors never
    expose their cause.

    :param exc: Exception raised within the service.
    :type exc: ServiceError
    :returns: API error ready to be rendered as problem+json.
    :rtype: chaitube.core.errors.APIError
    """
    if isinstance(exc, ValidationError):
        return api_errors.BadRequest(str(exc))

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    if isinstance(exc, InvalidCredentialsError):
        return api_errors.Unauthorized(str(exc), code="invalid_credentials")

    if isinstance(exc, InvalidTokenError):
        return api_errors.Unauthorized(str(exc), code="invalid_token")

    if isinstance(exc, AuthenticationError):
        return api_errors.Unauthorized(str(exc))

    # InternalError, MediaStoreError and any unmapped ServiceError
    return api_errors.InternalServerError()


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    - Services never touch the global session directly; always use a Unit of Work.
    - An explicit ``session`` is threaded into every UoW; when omitted the
      Flask-scoped session is used.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, session: Session | None = None) -> None:
        """
        Initialize the base service.

        :param session: Optional explicit SQLAlchemy session.
        :type session: Session | None
        """
        self._session = session

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(self._session)

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED", "REPEATABLE READ").
        :type isolation: str | None
        :param enforce_db_readonly: Apply `SET TRANSACTION READ ONLY` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            self._session,
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )
