"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

from tokencache.services._shared.ports import DEFAULT_ALGORITHM, TokenSettings

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Placeholder rejected outside development/testing; 64 bytes to suit HS512
PLACEHOLDER_SECRET: Final[str] = "CHANGE_ME_JWT_" + "0" * 50

# Load .env during development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    """Parse a number from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    JWT_SECRET_KEY: str
        Shared HMAC secret used to sign tokens. Defaults to a development-safe
        placeholder and must be overridden in production.
    JWT_ALGORITHM: str
        Signing algorithm (``HS512``).
    JWT_ACCESS_TOKEN_EXPIRES: float
        Fixed token validity window in seconds (5 hours by default).
    REDIS_URL: str | None
        Connection URL of the remote store. The cache is disabled when unset.
    CACHE_SOCKET_TIMEOUT: float
        Per-call deadline (seconds) applied to every Redis command.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    DEBUG: bool
        Toggles Flask debug mode.
    TESTING: bool
        Enables Flask testing mode when ``True``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    # Secrets / security
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", DEFAULT_ALGORITHM)
    JWT_ACCESS_TOKEN_EXPIRES = env_float("JWT_ACCESS_TOKEN_EXPIRES", 5 * 60 * 60)

    # Remote store
    REDIS_URL = os.getenv("REDIS_URL")
    CACHE_SOCKET_TIMEOUT = env_float("CACHE_SOCKET_TIMEOUT", 2.0)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Leaves ``REDIS_URL`` unset unless ``TEST_REDIS_URL`` is provided, so
      tests inject an in-memory client explicitly.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    REDIS_URL = os.getenv("TEST_REDIS_URL")
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled and refuses to start with the placeholder secret.
    """

    DEBUG = False
    PROPAGATE_EXCEPTIONS = False

    @classmethod
    def validate(cls) -> None:
        """Reject settings that are only acceptable outside production."""
        if not cls.JWT_SECRET_KEY or cls.JWT_SECRET_KEY == PLACEHOLDER_SECRET:
            raise RuntimeError("JWT_SECRET_KEY must be set in production.")


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def token_settings_from_config(config: Mapping[str, Any]) -> TokenSettings:
    """Build the immutable :class:`TokenSettings` from a Flask-style config mapping.

    Raises
    ------
    ValueError
        When the secret is empty or the validity window is not positive.
    """
    return TokenSettings(
        secret=config.get("JWT_SECRET_KEY") or "",
        algorithm=config.get("JWT_ALGORITHM") or DEFAULT_ALGORITHM,
        validity=timedelta(seconds=float(config.get("JWT_ACCESS_TOKEN_EXPIRES", 5 * 60 * 60))),
    )
