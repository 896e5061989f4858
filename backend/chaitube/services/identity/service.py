"""
IdentityService
===============

Aggregate service responsible for managing the `User` aggregate:
- Registration with uniqueness on username and email
- Profile fields (full_name, email) and media references (avatar, cover)
- Password lifecycle

Media goes through the :class:`~chaitube.services._shared.ports.MediaStore`
port. Uploads happen before the row is written; if the write fails, the
uploaded files are destroyed again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from chaitube.repositories.user import UserRepository
from chaitube.services._shared.base import BaseService
from chaitube.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    MediaStoreError,
    NotFoundError,
    ValidationError,
    violates,
)
from chaitube.services._shared.ports.media_store import MediaStore, MediaUpload
from chaitube.services.identity.dto import (
    UserPasswordChangeIn,
    UserPublicOut,
    UserRegisterIn,
    UserUpdateIn,
)

log = logging.getLogger(__name__)

DUPLICATE_USER_MESSAGE = "User with email or username already exists"


class IdentityService(BaseService):
    """
    Application service for the `User` aggregate.

    Responsibilities
    ----------------
    - Register users ensuring username/email uniqueness.
    - Retrieve and update profile fields safely.
    - Replace avatar and cover media.
    - Manage password lifecycle.
    """

    def __init__(
        self,
        *,
        media_store: MediaStore,
        require_avatar: bool = True,
        session=None,
    ) -> None:
        super().__init__(session=session)
        self.media = media_store
        self.require_avatar = require_avatar

    # --------------------------------------------------------------------- #
    # Registration
    # --------------------------------------------------------------------- #

    def register(self, dto: UserRegisterIn) -> UserPublicOut:
        """
        Register a new user.

        :param dto: User registration input DTO.
        :type dto: UserRegisterIn
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises ValidationError: When a field is blank or the avatar is missing.
        :raises ConflictError: When the username or email is taken, in any case.
        :raises MediaStoreError: When the avatar upload fails.
        """
        fields = (dto.username, dto.email, dto.full_name, dto.password)
        if any(not isinstance(v, str) or not v.strip() for v in fields):
            raise ValidationError("All fields are required")
        if self.require_avatar and dto.avatar is None:
            raise ValidationError("Avatar file is required")

        uploaded: list[str] = []
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users

                if repo.exists_by_username_or_email(username=dto.username, email=dto.email):
                    raise ConflictError("User", DUPLICATE_USER_MESSAGE)

                avatar_url = self._upload(dto.avatar, uploaded) if dto.avatar else None
                cover_url = self._upload_optional(dto.cover, uploaded)

                try:
                    user = repo.model(
                        username=dto.username,
                        email=dto.email,
                        full_name=dto.full_name,
                        password=dto.password,  # model hashes via setter
                        avatar_url=avatar_url,
                        cover_url=cover_url,
                    )
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc
                repo.add(user)

                result = UserPublicOut.from_model(user)
        except IntegrityError as exc:
            self._discard(uploaded)
            if violates(exc, "uq_users_email") or violates(exc, "uq_users_username"):
                raise ConflictError("User", DUPLICATE_USER_MESSAGE) from exc
            raise
        except Exception:
            self._discard(uploaded)
            raise

        log.info("identity.registered", extra={"user_id": result.id})
        return result

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_user(self, user_id: int) -> UserPublicOut:
        """
        Retrieve a user by identifier.

        :param user_id: User primary key.
        :type user_id: int
        :returns: Public-safe user DTO.
        :rtype: UserPublicOut
        :raises NotFoundError: If user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_model(user)

    # --------------------------------------------------------------------- #
    # Profile
    # --------------------------------------------------------------------- #

    def update_profile(self, user_id: int, dto: UserUpdateIn) -> UserPublicOut:
        """
        Update ``full_name`` and/or ``email``; nothing else is writable here.

        :param user_id: User identifier.
        :type user_id: int
        :param dto: Input DTO containing new values.
        :type dto: UserUpdateIn
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises ValidationError: When no field is provided or a value is malformed.
        :raises ConflictError: When the email belongs to another user.
        :raises NotFoundError: When user not found.
        """
        updates = {
            k: v
            for k, v in {"full_name": dto.full_name, "email": dto.email}.items()
            if isinstance(v, str) and v.strip()
        }
        if not updates:
            raise ValidationError("At least one of full_name or email is required")

        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_for_update(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)

                if "email" in updates:
                    other = repo.get_by_email(updates["email"])
                    if other is not None and other.id != user.id:
                        raise ConflictError("User", "email already in use")

                try:
                    repo.update(user, **updates)  # runs model validators
                except ValueError as exc:
                    raise ValidationError(str(exc)) from exc

                return UserPublicOut.from_model(user)
        except IntegrityError as exc:
            if violates(exc, "uq_users_email"):
                raise ConflictError("User", "email already in use") from exc
            raise

    # --------------------------------------------------------------------- #
    # Media
    # --------------------------------------------------------------------- #

    def update_avatar(self, user_id: int, upload: MediaUpload | None) -> UserPublicOut:
        """Replace the avatar; the previous file is destroyed afterwards."""
        if upload is None:
            raise ValidationError("Avatar file is missing")
        return self._replace_media(user_id, "avatar_url", upload)

    def update_cover(self, user_id: int, upload: MediaUpload | None) -> UserPublicOut:
        """Replace the cover image; the previous file is destroyed afterwards."""
        if upload is None:
            raise ValidationError("Cover image file is missing")
        return self._replace_media(user_id, "cover_url", upload)

    def _replace_media(self, user_id: int, field: str, upload: MediaUpload) -> UserPublicOut:
        new_url = self.media.store(upload)
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_for_update(user_id)
                if user is None:
                    raise NotFoundError("User", user_id)
                previous = getattr(user, field)
                repo.update(user, **{field: new_url})
                result = UserPublicOut.from_model(user)
        except Exception:
            self._discard([new_url])
            raise

        if previous:
            self._discard([previous])
        return result

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def change_password(self, dto: UserPasswordChangeIn) -> None:
        """
        Change a user's password after verifying the old one.

        Only the digest column is written; the live refresh token is kept.

        :param dto: Input DTO containing old and new passwords.
        :type dto: UserPasswordChangeIn
        :raises ValidationError: When the new password is blank.
        :raises NotFoundError: When user not found.
        :raises InvalidCredentialsError: When old password verification fails.
        """
        if not isinstance(dto.new_password, str) or not dto.new_password:
            raise ValidationError("New password is required")

        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.get_for_update(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)

            if not user.verify_password(dto.old_password or ""):
                log.info(
                    "identity.password_change.failed",
                    extra={"user_id": user.id, "reason": "bad_password"},
                )
                raise InvalidCredentialsError()

            repo.update_password(user, dto.new_password)

        log.info("identity.password_changed", extra={"user_id": dto.user_id})

    # --------------------------------------------------------------------- #
    # Media helpers
    # --------------------------------------------------------------------- #

    def _upload(self, upload: MediaUpload, uploaded: list[str]) -> str:
        url = self.media.store(upload)
        uploaded.append(url)
        return url

    def _upload_optional(self, upload: MediaUpload | None, uploaded: list[str]) -> str | None:
        """Cover uploads are best-effort: a failure leaves the cover empty."""
        if upload is None:
            return None
        try:
            return self._upload(upload, uploaded)
        except MediaStoreError as exc:
            log.warning("media.upload_failed", extra={"reason": str(exc)})
            return None

    def _discard(self, urls: Iterable[str]) -> None:
        for url in urls:
            try:
                self.media.destroy(url)
            except MediaStoreError as exc:
                log.warning("media.destroy_failed", extra={"reason": str(exc)})
