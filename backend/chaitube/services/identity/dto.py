"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety. Output DTOs are
allow-list projections: credential columns never leave the service layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from chaitube.services._shared.ports.media_store import MediaUpload

if TYPE_CHECKING:
    from chaitube.models.user import User

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserRegisterIn:
    """
    Input DTO for user registration.

    :param username: Public handle (normalized to lowercase).
    :type username: str
    :param email: Login email (normalized to lowercase).
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password: Raw password to be hashed by the model.
    :type password: str
    :param avatar: Avatar upload; mandatory unless configured otherwise.
    :type avatar: MediaUpload | None
    :param cover: Optional cover image upload.
    :type cover: MediaUpload | None
    """

    username: str
    email: str
    full_name: str
    password: str
    avatar: MediaUpload | None = None
    cover: MediaUpload | None = None


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Input DTO for updating profile fields.

    :param full_name: Optional new full name.
    :type full_name: str | None
    :param email: Optional new email.
    :type email: str | None
    """

    full_name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class UserPasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param user_id: User identifier.
    :type user_id: int
    :param old_password: Current password.
    :type old_password: str
    :param new_password: New password (raw).
    :type new_password: str
    """

    user_id: int
    old_password: str
    new_password: str


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: int
    :param username: Username.
    :type username: str
    :param email: Email address.
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param avatar_url: Avatar reference.
    :type avatar_url: str | None
    :param cover_url: Cover image reference.
    :type cover_url: str | None
    :param created_at: Creation timestamp.
    :type created_at: datetime | None
    """

    id: int
    username: str
    email: str
    full_name: str
    avatar_url: str | None = None
    cover_url: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        """Project a :class:`~chaitube.models.user.User` onto its public fields."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar_url=user.avatar_url,
            cover_url=user.cover_url,
            created_at=user.created_at,
        )
