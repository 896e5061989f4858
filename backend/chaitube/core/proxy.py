"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Apply :class:`werkzeug.middleware.proxy_fix.ProxyFix` when enabled.

    Parameters
    ----------
    app: flask.Flask
        Application whose WSGI pipeline should respect upstream proxy headers.

    Notes
    -----
    Controlled by ``USE_PROXYFIX`` (default ``True``) and ``PROXY_HOPS``
    (default ``1``). ``X-Forwarded-Proto`` must be trusted behind a TLS
    terminator, otherwise ``request.is_secure`` is false and ``Secure`` token
    cookies are dropped by browsers talking to the proxy over HTTPS.
    """
    if app.config.get("USE_PROXYFIX", True):
        hops = int(app.config.get("PROXY_HOPS", 1))
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
