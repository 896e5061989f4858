"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`chaitube.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``chaitube.services._shared.base``)
    * :class:`BaseService`

- Identity service (from ``chaitube.services.identity``)
    * :class:`IdentityService`
    * DTOs: :class:`UserRegisterIn`, :class:`UserUpdateIn`,
      :class:`UserPasswordChangeIn`, :class:`UserPublicOut`

- Auth service (from ``chaitube.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RefreshIn`, :class:`LoginOut`,
      :class:`TokenPairOut`, :class:`AuthTokenConfig`

- Subscription service (from ``chaitube.services.subscriptions``)
    * :class:`SubscriptionService`
    * DTOs: :class:`SubscriptionOut`, :class:`ChannelProfileOut`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import AuthTokenConfig, LoginIn, LoginOut, RefreshIn, TokenPairOut
from .auth.service import AuthService
from .identity.dto import UserPasswordChangeIn, UserPublicOut, UserRegisterIn, UserUpdateIn
from .identity.service import IdentityService
from .subscriptions.dto import ChannelProfileOut, SubscriptionOut
from .subscriptions.service import SubscriptionService

__all__ = [
    # Base
    "BaseService",
    # Identity
    "IdentityService",
    "UserRegisterIn",
    "UserUpdateIn",
    "UserPasswordChangeIn",
    "UserPublicOut",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    "TokenPairOut",
    # Subscriptions
    "SubscriptionService",
    "SubscriptionOut",
    "ChannelProfileOut",
]
