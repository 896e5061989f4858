"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from chaitube.core.config import BaseConfig, get_config
from chaitube.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the chaitube Flask application.

    Token secrets are validated while the API is registered, so a
    misconfigured deployment fails here rather than on the first login.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from chaitube.core import proxy

    proxy.init_app(app)

    from chaitube.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from chaitube.core import cors

    cors.init_app(app)

    from chaitube.api import init_app as init_api

    init_api(app)

    from chaitube.core import errors

    errors.init_app(app)

    from chaitube import cli as app_cli

    app_cli.init_app(app)

    return app
