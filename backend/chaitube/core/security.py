"""Password hashing built on Werkzeug's salted key-derivation helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

log = logging.getLogger(__name__)

# scrypt with N=2**15, r=8, p=1. Changing it only affects newly hashed
# passwords; existing digests embed their own parameters.
DEFAULT_METHOD = "scrypt:32768:8:1"
DEFAULT_SALT_LENGTH = 16


@dataclass(frozen=True, slots=True)
class PasswordHasher:
    """
    One-way, salted password hashing with a fixed work factor.

    :param method: Werkzeug method string (``scrypt:N:r:p`` or ``pbkdf2:sha256:iterations``).
    :type method: str
    :param salt_length: Random salt length in characters.
    :type salt_length: int
    """

    method: str = DEFAULT_METHOD
    salt_length: int = DEFAULT_SALT_LENGTH

    def hash(self, raw: str) -> str:
        """
        Derive a digest for ``raw``.

        :param raw: Plain text password.
        :type raw: str
        :returns: Self-describing digest (``method$salt$hash``).
        :rtype: str
        :raises ValueError: If ``raw`` is empty or not a string.
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(raw, method=self.method, salt_length=self.salt_length)

    def verify(self, raw: str, digest: str | None) -> bool:
        """
        Check ``raw`` against ``digest`` in constant time.

        Any failure (missing digest, unknown method, malformed digest) is
        reported as a mismatch so callers cannot tell the cases apart.

        :param raw: Candidate password.
        :type raw: str
        :param digest: Stored digest.
        :type digest: str | None
        :returns: ``True`` only when the password matches.
        :rtype: bool
        """
        if not digest or not isinstance(raw, str):
            return False
        try:
            return bool(check_password_hash(digest, raw))
        except (ValueError, TypeError):
            log.warning("password.verify_failed")
            return False


password_hasher = PasswordHasher()
