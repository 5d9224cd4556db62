"""
tokencache.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token issuing/verification and typed cache access.

These ports decouple the application layer from concrete implementations
of token signing and remote key-value storage.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider` — abstraction for signed token creation
    and verification — and :class:`~.TokenSettings`, its immutable config.

- :mod:`cache_store`:
    Defines :class:`~.CacheStore` — typed facade over scalar, list, set and
    field-map values with optional TTL.

Design Notes
------------
Concrete adapters (PyJWT, Redis) implement these interfaces under
``tokencache.infra``.
"""

from __future__ import annotations

from .cache_store import TTL, CacheStore
from .token_provider import (
    DEFAULT_ALGORITHM,
    DEFAULT_VALIDITY,
    RESERVED_CLAIMS,
    TokenProvider,
    TokenSettings,
)

__all__ = [
    "TTL",
    "CacheStore",
    "TokenProvider",
    "TokenSettings",
    "DEFAULT_ALGORITHM",
    "DEFAULT_VALIDITY",
    "RESERVED_CLAIMS",
]
