"""Unit tests for structured logging helpers."""

from __future__ import annotations

import json
import logging

from chaitube.core.logger import JSONFormatter, redact_tokens

SAMPLE_JWT = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9"
    ".eyJzdWIiOiIxIiwidHlwZSI6InJlZnJlc2gifQ"
    ".c2lnbmF0dXJlLWJ5dGVz"
)


class TestRedactTokens:
    def test_jwt_is_replaced(self):
        text = f"presented token {SAMPLE_JWT} was rejected"
        assert redact_tokens(text) == "presented token [redacted-token] was rejected"

    def test_plain_text_is_untouched(self):
        assert redact_tokens("auth.login.failed") == "auth.login.failed"


class TestJSONFormatter:
    def _record(self, msg: str, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            name="chaitube.test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_extra_fields_are_copied(self):
        """
        GIVEN a record carrying ``user_id`` and ``reason`` extras
        WHEN it is formatted
        THEN both appear as top-level JSON keys.
        """
        payload = json.loads(
            JSONFormatter().format(self._record("auth.refresh.rejected", user_id=7, reason="reused"))
        )

        assert payload["message"] == "auth.refresh.rejected"
        assert payload["user_id"] == 7
        assert payload["reason"] == "reused"
        assert payload["level"] == "INFO"

    def test_tokens_in_messages_are_redacted(self):
        payload = json.loads(JSONFormatter().format(self._record(f"echo {SAMPLE_JWT}")))
        assert SAMPLE_JWT not in payload["message"]
