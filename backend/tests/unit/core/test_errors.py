"""Unit tests for the service → HTTP error translation."""

from __future__ import annotations

import pytest

from chaitube.core import errors as api_errors
from chaitube.services._shared.base import translate_service_error
from chaitube.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    MediaStoreError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


class TestTranslateServiceError:
    @pytest.mark.parametrize(
        ("exc", "status", "code"),
        [
            (ValidationError("All fields are required"), 400, "bad_request"),
            (NotFoundError("Channel", "ghost"), 404, "not_found"),
            (ConflictError("User", "taken"), 409, "conflict"),
            (AuthenticationError(), 401, "unauthorized"),
            (InvalidCredentialsError(), 401, "invalid_credentials"),
            (InvalidTokenError(), 401, "invalid_token"),
            (MediaStoreError("bucket on fire"), 500, "internal_server_error"),
            (InternalError("stack trace here"), 500, "internal_server_error"),
            (ServiceError("unmapped"), 500, "internal_server_error"),
        ],
    )
    def test_status_and_code(self, exc, status, code):
        translated = translate_service_error(exc)
        assert isinstance(translated, api_errors.APIError)
        assert translated.status_code == status
        assert translated.code == code

    def test_internal_errors_do_not_leak_their_cause(self):
        """
        GIVEN an internal failure carrying a detailed message
        WHEN it is translated
        THEN the client-facing message is the generic one.
        """
        translated = translate_service_error(MediaStoreError("s3://bucket/key denied"))
        assert translated.message == "Something went wrong"

    def test_credential_messages_are_fixed(self):
        assert translate_service_error(InvalidCredentialsError()).message == (
            "Invalid user credentials"
        )
        assert translate_service_error(InvalidTokenError()).message == "Invalid or expired token"
