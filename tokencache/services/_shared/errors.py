"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or the Redis client directly. They serve as stable contracts
between the token/cache adapters and the application code consuming them.

The translation to HTTP responses (RFC 7807) is handled by
``tokencache/core/errors.py``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer translates them to ``APIError`` responses.
    """

    pass


# --------------------------------------------------------------------------- #
# Token errors
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """Base class for token verification failures."""

    default_message = "Token rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidTokenError(TokenError):
    """
    Raised when a token is malformed, signed with another key or algorithm,
    or misses a required claim.

    .. note::
       The message is intentionally generic; the underlying library error is
       only available as ``__cause__``.
    """

    default_message = "Invalid token"


class TokenExpiredError(TokenError):
    """Raised when a well-formed, correctly signed token is past its expiry."""

    default_message = "Token has expired"


# --------------------------------------------------------------------------- #
# Cache errors
# --------------------------------------------------------------------------- #


class CacheError(ServiceError):
    """
    Base class for cache facade failures.

    :param operation: Facade operation that failed (e.g. ``"set_value"``).
    :type operation: str
    :param key: Cache key involved, when there is a single one.
    :type key: str | None
    :param message: Optional human-readable summary.
    :type message: str | None
    """

    default_message = "Cache operation failed"

    def __init__(self, operation: str, key: str | None = None, message: str | None = None) -> None:
        self.operation = operation
        self.key = key
        super().__init__(message or self.default_message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.key is None:
            return f"{base} ({self.operation})"
        return f"{base} ({self.operation} key={self.key!r})"


class CacheSetError(CacheError):
    """Raised when a write (set, push, add, put, delete) fails on the backend."""

    default_message = "Cache write failed"


class CacheGetError(CacheError):
    """Raised when a read fails on the backend."""

    default_message = "Cache read failed"


class CacheExpireError(CacheError):
    """Raised when applying a TTL fails on the backend."""

    default_message = "Cache expire failed"


class SerializationError(CacheError):
    """
    Raised when a value cannot be encoded for the store, or a stored value
    cannot be decoded/coerced into the requested shape.
    """

    default_message = "Cache value could not be (de)serialized"


__all__ = [
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
