"""Global pytest fixtures for the token service and the cache facade."""

from __future__ import annotations

from collections.abc import Generator
from datetime import UTC, datetime

import fakeredis
import pytest
from flask import Flask

from tokencache import create_app
from tokencache.infra.jwt.pyjwt_token_provider import JWTTokenService
from tokencache.infra.redis.redis_cache_facade import RedisCacheFacade
from tokencache.services._shared.ports import TokenSettings

from tests.helpers.tokens import SECRET, FakeClock


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Fixed secret so tests can mint tokens out of band.
    - No ``REDIS_URL``: the fixture injects a FakeRedis client instead.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = SECRET
    LOG_LEVEL = "WARNING"


@pytest.fixture()
def clock() -> FakeClock:
    """A clock frozen at a whole second so ``iat`` is not truncated."""
    return FakeClock(datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture()
def settings() -> TokenSettings:
    return TokenSettings(secret=SECRET)


@pytest.fixture()
def token_service(settings: TokenSettings, clock: FakeClock) -> JWTTokenService:
    """Token service bound to the test secret and the fake clock."""
    return JWTTokenService(settings=settings, clock=clock)


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    # ensure a clean starting point
    r.flushall()
    return r


@pytest.fixture()
def disconnected_redis() -> fakeredis.FakeRedis:
    """A FakeRedis whose every command fails with ``redis.ConnectionError``."""
    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeRedis(server=server)


@pytest.fixture()
def cache(fake_redis: fakeredis.FakeRedis) -> RedisCacheFacade:
    """Provide a RedisCacheFacade backed by FakeRedis."""
    return RedisCacheFacade(r=fake_redis)


@pytest.fixture()
def broken_cache(disconnected_redis: fakeredis.FakeRedis) -> RedisCacheFacade:
    return RedisCacheFacade(r=disconnected_redis)


@pytest.fixture()
def app(fake_redis: fakeredis.FakeRedis) -> Generator[Flask, None, None]:
    """Create a Flask application wired to FakeRedis."""
    application = create_app(TestConfig, redis_client=fake_redis)
    with application.app_context():
        yield application
