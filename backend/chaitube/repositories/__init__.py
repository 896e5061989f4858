"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from chaitube.repositories.base import BaseRepository
from chaitube.repositories.subscription import SubscriptionRepository
from chaitube.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "SubscriptionRepository",
    "UserRepository",
]
