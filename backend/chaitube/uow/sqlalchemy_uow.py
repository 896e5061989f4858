"""
SQLAlchemy implementation of UnitOfWork for Flask.

Both units of work expose ``users`` and ``subscriptions`` repositories bound
to one session, so a rotation or a follow runs in a single transaction.
"""

from __future__ import annotations

from contextlib import suppress

from flask import current_app
from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from chaitube.core.extensions import db
from chaitube.repositories import SubscriptionRepository, UserRepository
from chaitube.uow.base import UnitOfWork

# Dialects that understand ``SET TRANSACTION`` inside an open transaction.
_SET_TRANSACTION_DIALECTS = ("postgresql", "mysql", "mariadb")

_ISOLATION_LEVELS = frozenset(
    {"READ UNCOMMITTED", "READ COMMITTED", "REPEATABLE READ", "SERIALIZABLE"}
)

# Leading keywords of statements that modify data or schema.
_WRITE_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "merge",
    "replace",
    "create",
    "alter",
    "drop",
    "truncate",
    "grant",
    "revoke",
)


class SQLAlchemyRepositoryContainer:
    """Repositories sharing one SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.subscriptions = SubscriptionRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write unit of work: commits when the block exits cleanly, rolls back otherwise.

    The refresh-token swap relies on this: the conditional UPDATE and the
    commit happen inside one block, so a losing rotation leaves no trace.
    """

    def __init__(self, session: Session | None = None) -> None:
        """
        :param session: Explicit session; defaults to the Flask-scoped ``db.session``.
        :type session: :class:`sqlalchemy.orm.Session` | None
        """
        super().__init__(session=session if session is not None else db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except Exception:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only unit of work for lookups such as the current user or a channel profile.

    Parameters
    ----------
    session:
        Explicit session; defaults to the Flask-scoped ``db.session``.
    isolation_level:
        One of the standard SQL isolation levels, or ``None`` to keep the
        connection default.
    enforce_db_readonly:
        Issue ``SET TRANSACTION READ ONLY`` where the dialect supports it.

    Notes
    -----
    Two guards are installed for the lifetime of the block, whatever the
    dialect: a ``before_flush`` hook that refuses pending ORM changes and a
    ``before_cursor_execute`` hook that refuses DML/DDL text. On exit the
    transaction is rolled back if this unit of work opened it.

    SQLite has no ``SET TRANSACTION``; the guards alone apply there.
    """

    def __init__(
        self,
        session: Session | None = None,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=session if session is not None else db.session)
        if isolation_level is not None:
            isolation_level = isolation_level.upper().strip()
            if isolation_level not in _ISOLATION_LEVELS:
                raise ValueError(f"Unsupported isolation level: {isolation_level!r}")
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly

        self._conn: Connection | None = None
        self._txn_ctx: SessionTransaction | None = None
        self._guarded = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # Attach to an already running transaction when there is one; the
        # guards still apply but SET TRANSACTION must be skipped.
        self._txn_ctx = None
        with suppress(InvalidRequestError):
            txn_ctx = self.session.begin()
            txn_ctx.__enter__()
            self._txn_ctx = txn_ctx

        self._conn = self.session.connection()
        self._install_guards()
        if self._txn_ctx is not None:
            self._apply_transaction_characteristics()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                try:
                    self._txn_ctx.__exit__(exc_type, exc, tb)
                finally:
                    self._txn_ctx = None
        finally:
            self._remove_guards()
            self._conn = None

    def commit(self) -> None:
        """
        :raises RuntimeError: always; nothing is ever committed from here.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    # ----------------------------- Internals ---------------------------------

    def _apply_transaction_characteristics(self) -> None:
        """Send ``SET TRANSACTION`` on dialects that accept it mid-session."""
        assert self._conn is not None
        if self._conn.dialect.name not in _SET_TRANSACTION_DIALECTS:
            return
        try:
            if self.isolation_level:
                self.session.execute(
                    text(f"SET TRANSACTION ISOLATION LEVEL {self.isolation_level}")
                )
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            current_app.logger.warning(
                "SET TRANSACTION rejected (%s); relying on write guards only.", exc
            )

    def _guard_target(self):
        return self._conn if self._conn is not None else self.session.get_bind()

    def _refuse_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError(
                "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
            )

    def _refuse_write_sql(self, conn, cursor, statement, parameters, context, executemany) -> None:
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword.startswith(_WRITE_KEYWORDS):
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")

    def _install_guards(self) -> None:
        if self._guarded:
            return
        event.listen(self.session, "before_flush", self._refuse_flush)
        event.listen(self._guard_target(), "before_cursor_execute", self._refuse_write_sql)
        self._guarded = True

    def _remove_guards(self) -> None:
        if not self._guarded:
            return
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._refuse_flush)
        with suppress(InvalidRequestError):
            event.remove(self._guard_target(), "before_cursor_execute", self._refuse_write_sql)
        self._guarded = False
