"""Fixtures shared by HTTP-level tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from tests.helpers.http import registration_form

API = "/api/v1"


@pytest.fixture()
def bare_client(app, session, media_store):
    """Test client that never stores cookies; tokens travel explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture()
def register(bare_client) -> Callable[..., dict[str, Any]]:
    """Register a user over HTTP and return the response ``data``."""

    def _register(username: str, **kwargs: Any) -> dict[str, Any]:
        resp = bare_client.post(
            f"{API}/users/register",
            data=registration_form(username, **kwargs),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register


@pytest.fixture()
def login(bare_client) -> Callable[..., dict[str, Any]]:
    """Log in over HTTP and return the response ``data`` (user plus tokens)."""

    def _login(username: str, password: str = "secret-pass-1") -> dict[str, Any]:
        resp = bare_client.post(
            f"{API}/users/login", json={"username": username, "password": password}
        )
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login
