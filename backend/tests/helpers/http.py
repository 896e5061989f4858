"""HTTP helper utilities for tests."""

from __future__ import annotations

import io
from typing import Any


def set_cookies(response) -> dict[str, str]:
    """Map cookie name to its raw ``Set-Cookie`` header value.

    Parameters
    ----------
    response:
        Test-client response.

    Returns
    -------
    dict[str, str]
        One entry per cookie set by the response.
    """

    cookies: dict[str, str] = {}
    for header in response.headers.getlist("Set-Cookie"):
        name = header.split("=", 1)[0]
        cookies[name] = header
    return cookies


def cookie_value(response, name: str) -> str | None:
    """Return the value a response assigned to cookie ``name``."""

    header = set_cookies(response).get(name)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1]


def registration_form(
    username: str,
    *,
    email: str | None = None,
    full_name: str = "Test User",
    password: str = "secret-pass-1",
    avatar: bool = True,
    cover: bool = False,
) -> dict[str, Any]:
    """Build a multipart body for ``POST /users/register``."""

    form: dict[str, Any] = {
        "username": username,
        "email": email or f"{username}@example.com",
        "full_name": full_name,
        "password": password,
    }
    if avatar:
        form["avatar"] = (io.BytesIO(b"\x89PNG avatar"), "avatar.png")
    if cover:
        form["cover_image"] = (io.BytesIO(b"\x89PNG cover"), "cover.png")
    return form
