"""Global extension instances and initialization helpers."""

from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from flask import Flask
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from tokencache.core.config import token_settings_from_config
from tokencache.core.logger import redact
from tokencache.infra.jwt.pyjwt_token_provider import JWTTokenService
from tokencache.infra.redis.redis_cache_facade import RedisCacheFacade

log = logging.getLogger(__name__)

# Global singletons (import-safe)
redis_client: redis.Redis | None = None
token_service: JWTTokenService | None = None
cache: RedisCacheFacade | None = None


def init_app(app: Flask, *, redis_override: redis.Redis | None = None) -> None:
    """Initialize the token service and, when configured, the Redis cache.

    Parameters
    ----------
    app: flask.Flask
        Application whose config provides ``JWT_*``, ``REDIS_URL`` and
        ``CACHE_SOCKET_TIMEOUT``.
    redis_override: redis.Redis | None
        Pre-built client (e.g. ``fakeredis.FakeRedis``) used instead of
        connecting to ``REDIS_URL``.

    Raises
    ------
    RuntimeError
        When Redis is configured but unreachable.
    """
    global redis_client, token_service, cache

    token_service = JWTTokenService(settings=token_settings_from_config(app.config))
    app.extensions["token_service"] = token_service

    redis_url = app.config.get("REDIS_URL")
    if redis_override is not None:
        redis_client = redis_override
    elif redis_url:
        timeout = float(app.config.get("CACHE_SOCKET_TIMEOUT", 2.0))
        redis_client = redis.Redis.from_url(
            redis_url,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redact(redis_url)!r}") from exc
    else:
        redis_client = None
        cache = None
        app.extensions.pop("redis_client", None)
        app.extensions.pop("cache", None)
        log.info("REDIS_URL not set; cache facade disabled")
        return

    cache = RedisCacheFacade(r=redis_client)
    app.extensions["redis_client"] = redis_client
    app.extensions["cache"] = cache


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client


def get_token_service() -> JWTTokenService:
    """Return the initialized token service."""
    if token_service is None:
        raise RuntimeError("Token service is not initialized. Call init_app() first.")
    return token_service


def get_cache() -> RedisCacheFacade:
    """Return the initialized cache facade."""
    if cache is None:
        raise RuntimeError("Cache is not initialized. Set REDIS_URL and call init_app().")
    return cache
