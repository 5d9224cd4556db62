"""Service layer public API.

This package exposes the contracts the application layer depends on so that
callers can import from :mod:`tokencache.services` without knowing internal
structure.

Re-exports
----------
- Ports (from ``tokencache.services._shared.ports``)
    * :class:`TokenProvider`, :class:`TokenSettings`
    * :class:`CacheStore`

- Errors (from ``tokencache.services._shared.errors``)
    * :class:`InvalidTokenError`, :class:`TokenExpiredError`
    * :class:`CacheSetError`, :class:`CacheGetError`, :class:`CacheExpireError`,
      :class:`SerializationError`
"""

from __future__ import annotations

from ._shared.errors import (
    CacheError,
    CacheExpireError,
    CacheGetError,
    CacheSetError,
    InvalidTokenError,
    SerializationError,
    ServiceError,
    TokenError,
    TokenExpiredError,
)
from ._shared.ports import CacheStore, TokenProvider, TokenSettings

__all__ = [
    "CacheStore",
    "TokenProvider",
    "TokenSettings",
    "ServiceError",
    "TokenError",
    "InvalidTokenError",
    "TokenExpiredError",
    "CacheError",
    "CacheSetError",
    "CacheGetError",
    "CacheExpireError",
    "SerializationError",
]
