"""Application factory wiring configuration, logging and extensions."""

from __future__ import annotations

from typing import Any

from flask import Flask

from tokencache.core.config import BaseConfig, get_config
from tokencache.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    redis_client: Any | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :param config: Config object/class or import path; defaults to ``APP_ENV`` selection.
    :param redis_client: Optional pre-built Redis client (tests pass ``fakeredis``).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    selected = get_config() if config is None else config
    validate = getattr(selected, "validate", None)
    if callable(validate):
        validate()

    app.config.from_object(selected)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from tokencache.core import extensions

    extensions.init_app(app, redis_override=redis_client)

    init_logging(app)

    from tokencache.core import errors

    errors.init_app(app)

    return app
