"""
chaitube.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for signing and verifying
    access/refresh tokens.

- :mod:`media_store`:
    Defines :class:`~.MediaStore` and :class:`~.MediaUpload`, the abstraction for
    the external host of avatars and cover images, plus
    :class:`~.InMemoryMediaStore`.

Design Notes
------------
Concrete adapters live under ``chaitube.infra`` (PyJWT, local filesystem).
"""

from __future__ import annotations

from .media_store import InMemoryMediaStore, MediaStore, MediaUpload
from .token_provider import TokenProvider

__all__ = [
    "TokenProvider",
    "MediaStore",
    "MediaUpload",
    "InMemoryMediaStore",
]
