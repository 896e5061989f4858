from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """
    Port for issuing and verifying signed bearer tokens.

    Access and refresh tokens are signed with distinct secrets; a token of one
    kind never verifies as the other. Decoding failures of any sort surface as
    :class:`~chaitube.services._shared.errors.InvalidTokenError`.
    """

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: int | str,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode_access_token(self, token: str) -> dict[str, Any]: ...

    def decode_refresh_token(self, token: str) -> dict[str, Any]: ...
