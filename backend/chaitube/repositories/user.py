"""User repository for persistence and credential-state utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select, update

from chaitube.models.user import User
from chaitube.repositories.base import BaseRepository


def _normalize_handle(value: str) -> str:
    return value.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on safe lookup and credential-state writes.
    It NEVER signs or verifies tokens; it only stores the opaque refresh
    token string the auth service hands over.
    """

    model = User

    def _updatable_fields(self):
        """Publicly allowed updatable fields (never password or refresh token)."""
        return {"email", "full_name", "avatar_url", "cover_url"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == _normalize_handle(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def find_by_handle(
        self, *, username: str | None = None, email: str | None = None
    ) -> User | None:
        """Fetch the user whose username OR email matches.

        Both columns are stored normalized, so the lookup lowercases the
        inputs and compares exactly. Blank handles are ignored.

        :param username: Candidate username.
        :type username: str | None
        :param email: Candidate email.
        :type email: str | None
        :returns: Matching user or ``None``.
        :rtype: User | None
        """
        clauses = []
        if username and username.strip():
            clauses.append(User.username == _normalize_handle(username))
        if email and email.strip():
            clauses.append(User.email == _normalize_handle(email))
        if not clauses:
            return None
        stmt = select(User).where(or_(*clauses)).order_by(User.id)
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_username_or_email(self, *, username: str, email: str) -> bool:
        """Return ``True`` when either handle is already taken.

        :param username: Username to check.
        :type username: str
        :param email: Email to check.
        :type email: str
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(User.id).where(
            or_(
                User.username == _normalize_handle(username),
                User.email == _normalize_handle(email),
            )
        )
        return bool(self.session.execute(stmt).first())

    # ---------------------------- Password ops ----------------------------

    def update_password(self, user: User, new_password: str) -> None:
        """Replace a user's password digest and flush the session.

        :param user: Target user.
        :type user: User
        :param new_password: Raw password to assign; model handles hashing.
        :type new_password: str
        :raises ValueError: If the password is empty.
        """
        user.password = new_password  # invokes setter → hash
        self.flush()

    # ---------------------------- Refresh token ops ----------------------------

    def set_refresh_token(self, user_id: int, token: str | None) -> None:
        """Unconditionally store ``token`` as the user's live refresh token.

        :param user_id: Identifier of the user.
        :type user_id: int
        :param token: New refresh token, or ``None`` to clear it.
        :type token: str | None
        """
        stmt = update(User).where(User.id == user_id).values(refresh_token=token)
        self.session.execute(stmt, execution_options={"synchronize_session": "evaluate"})

    def clear_refresh_token(self, user_id: int) -> None:
        """Drop the stored refresh token; idempotent."""
        self.set_refresh_token(user_id, None)

    def swap_refresh_token(self, user_id: int, *, expected: str, new: str) -> bool:
        """Compare-and-swap the stored refresh token.

        Issues a single conditional ``UPDATE`` so that, of two concurrent
        rotations presenting the same token, exactly one matches a row.

        :param user_id: Identifier of the user.
        :type user_id: int
        :param expected: Token the caller presented.
        :type expected: str
        :param new: Token to store when ``expected`` is still current.
        :type new: str
        :returns: ``True`` when the swap happened; ``False`` otherwise.
        :rtype: bool
        """
        stmt = (
            update(User)
            .where(User.id == user_id, User.refresh_token == expected)
            .values(refresh_token=new)
        )
        result = self.session.execute(stmt, execution_options={"synchronize_session": "evaluate"})
        return result.rowcount == 1
