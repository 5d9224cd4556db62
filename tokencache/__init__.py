"""Stateless signed tokens and a typed Redis cache facade.

Provide convenient access to :func:`tokencache.factory.create_app` and the two
core components so callers can ``from tokencache import JWTTokenService``
without traversing the package structure.
"""

from __future__ import annotations

from .factory import create_app
from .infra.jwt.pyjwt_token_provider import JWTTokenService
from .infra.redis.redis_cache_facade import RedisCacheFacade
from .services._shared.ports import TokenSettings

__all__ = ["create_app", "JWTTokenService", "RedisCacheFacade", "TokenSettings"]
