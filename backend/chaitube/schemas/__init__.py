"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .channel import ChannelProfileSchema, SubscriptionSchema
from .user import UpdateAccountSchema, UserSchema

__all__ = [
    "ChangePasswordSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "ChannelProfileSchema",
    "SubscriptionSchema",
    "UpdateAccountSchema",
    "UserSchema",
]
