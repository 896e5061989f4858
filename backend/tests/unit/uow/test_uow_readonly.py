"""Unit tests for SQLAlchemyReadOnlyUnitOfWork write guards."""

import pytest
from sqlalchemy import text

from chaitube.models.user import User
from chaitube.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from chaitube.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_blocks_core_dml(self, app, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("UPDATE users SET refresh_token = :t"), {"t": "forged"}
            )

    def test_allows_reads(self, app, session):
        with RWuow() as uow:
            uow.session.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, app, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guards_are_removed_on_exit(self, app, session):
        """
        GIVEN a read-only scope that has ended
        WHEN a writer scope persists a user
        THEN no guard from the earlier scope interferes.
        """
        with ROuow() as uow:
            uow.session.query(User).count()

        with RWuow() as uow:
            user = uow.users.add(UserFactory.build())

        assert session.get(User, user.id) is not None

    def test_rejects_unknown_isolation_level(self, app, session):
        with pytest.raises(ValueError, match="Unsupported isolation level"):
            ROuow(isolation_level="READ SOMETIMES")

    def test_normalizes_isolation_level(self, app, session):
        assert ROuow(isolation_level=" repeatable read ").isolation_level == "REPEATABLE READ"
