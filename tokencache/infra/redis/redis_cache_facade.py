# comments in English; reST docstrings
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, cast

import redis  # type: ignore[import-untyped]

from tokencache.infra.redis import codec
from tokencache.services._shared.errors import (
    CacheError,
    CacheExpireError,
    CacheGetError,
    CacheSetError,
)
from tokencache.services._shared.ports import TTL, CacheStore

log = logging.getLogger(__name__)


def ttl_to_millis(ttl: TTL) -> int:
    """
    Normalize a TTL (seconds or ``timedelta``) to whole milliseconds.

    :raises ValueError: When the TTL is not strictly positive.
    """
    if isinstance(ttl, bool):
        raise ValueError("TTL must be a number of seconds or a timedelta.")
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else float(ttl)
    millis = int(round(seconds * 1000))
    if millis <= 0:
        raise ValueError(f"TTL must be positive, got {ttl!r}.")
    return millis


@dataclass(slots=True)
class RedisCacheFacade(CacheStore):
    """
    Typed facade over a Redis client.

    Scalars map to Redis strings, sequences to lists, sets to sets and field
    maps to hashes. Values cross the boundary as JSON text (see
    :mod:`tokencache.infra.redis.codec`).

    Backend failures are wrapped into :class:`CacheSetError`,
    :class:`CacheGetError` or :class:`CacheExpireError` with the original
    exception chained. Nothing is retried.

    :param r: A Redis client (already connected). Must be safe for concurrent use.
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @contextmanager
    def _backend(self, error: type[CacheError], operation: str, key: str | None) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            log.warning("cache.%s failed key=%s error=%s", operation, key, type(exc).__name__)
            raise error(operation, key) from exc

    # -------------------- scalars --------------------

    def set_value(self, key: str, value: Any, ttl: TTL | None = None) -> None:
        """Store ``value`` under ``key``; ``ttl=None`` means no expiry."""
        px = ttl_to_millis(ttl) if ttl is not None else None
        payload = codec.encode_value(value, operation="set_value", key=key)
        with self._backend(CacheSetError, "set_value", key):
            self.r.set(key, payload, px=px)

    def get_value(self, key: str) -> Any | None:
        """Return the stored value, or ``None`` when the key is absent."""
        with self._backend(CacheGetError, "get_value", key):
            raw = self.r.get(key)
        return codec.decode_value(raw, operation="get_value", key=key)

    def get_value_as(self, key: str, target: Any) -> Any | None:
        """
        Return the stored value coerced into ``target``.

        :param target: marshmallow ``Schema``, dataclass, or callable type.
        :returns: Coerced value, or ``None`` when absent.
        :raises SerializationError: When the value does not fit ``target``.
        """
        value = self.get_value(key)
        if value is None:
            return None
        return codec.coerce(value, target, operation="get_value_as", key=key)

    # -------------------- lifecycle ------------------

    def set_expiry(self, key: str, ttl: TTL) -> bool:
        """Apply ``ttl`` to an existing key. :returns: ``False`` if the key does not exist."""
        px = ttl_to_millis(ttl)
        with self._backend(CacheExpireError, "set_expiry", key):
            return bool(self.r.pexpire(key, px))

    def delete(self, key: str) -> bool:
        """:returns: ``True`` if the key existed."""
        with self._backend(CacheSetError, "delete", key):
            return cast(int, self.r.delete(key)) == 1

    def delete_many(self, keys: Iterable[str]) -> int:
        """:returns: Number of keys actually removed."""
        names = list(keys)
        if not names:
            return 0
        with self._backend(CacheSetError, "delete_many", None):
            return int(self.r.delete(*names))

    # -------------------- sequences ------------------

    def append_all(self, key: str, items: Iterable[Any]) -> int:
        """Append ``items`` in order. :returns: New length of the list."""
        encoded = codec.encode_items(items, operation="append_all", key=key)
        with self._backend(CacheSetError, "append_all", key):
            if not encoded:
                return int(self.r.llen(key))
            return int(self.r.rpush(key, *encoded))

    def get_all(self, key: str) -> list[Any]:
        """Snapshot of the whole list; empty when absent."""
        with self._backend(CacheGetError, "get_all", key):
            raws = self.r.lrange(key, 0, -1)
        return codec.decode_items(raws, operation="get_all", key=key)

    def get_all_as(self, key: str, target: Any) -> list[Any]:
        return [codec.coerce(v, target, operation="get_all_as", key=key) for v in self.get_all(key)]

    # -------------------- sets -----------------------

    def add_to_set(self, key: str, items: Iterable[Any]) -> int:
        """:returns: Number of members that were not already present."""
        encoded = codec.encode_items(items, operation="add_to_set", key=key)
        if not encoded:
            return 0
        with self._backend(CacheSetError, "add_to_set", key):
            return int(self.r.sadd(key, *encoded))

    def get_set(self, key: str) -> set[Any]:
        with self._backend(CacheGetError, "get_set", key):
            raws = self.r.smembers(key)
        return codec.decode_members(raws, operation="get_set", key=key)

    # -------------------- field maps -----------------

    def put_fields(self, key: str, fields: Mapping[str, Any] | None) -> None:
        """Write several fields at once; ``None`` or an empty mapping is a no-op."""
        if not fields:
            return
        encoded = codec.encode_fields(fields, operation="put_fields", key=key)
        with self._backend(CacheSetError, "put_fields", key):
            self.r.hset(key, mapping=encoded)

    def put_field(self, key: str, field: str, value: Any) -> None:
        payload = codec.encode_value(value, operation="put_field", key=key)
        with self._backend(CacheSetError, "put_field", key):
            self.r.hset(key, field, payload)

    def get_fields(self, key: str) -> dict[str, Any]:
        with self._backend(CacheGetError, "get_fields", key):
            raws = self.r.hgetall(key)
        return codec.decode_fields(raws, operation="get_fields", key=key)

    def get_field(self, key: str, field: str) -> Any | None:
        with self._backend(CacheGetError, "get_field", key):
            raw = self.r.hget(key, field)
        return codec.decode_value(raw, operation="get_field", key=key)

    def get_field_values(self, key: str, fields: Iterable[str]) -> list[Any | None]:
        """Values for ``fields`` in input order; missing fields are ``None``."""
        names = list(fields)
        if not names:
            return []
        with self._backend(CacheGetError, "get_field_values", key):
            raws = self.r.hmget(key, names)
        return [codec.decode_value(raw, operation="get_field_values", key=key) for raw in raws]

    # -------------------- discovery ------------------

    def keys_matching(self, pattern: str) -> list[str]:
        """
        Keys matching a glob-style ``pattern``.

        Iterates with ``SCAN``; the result is a point-in-time snapshot that may
        miss or include keys mutated concurrently.
        """
        with self._backend(CacheGetError, "keys_matching", None):
            found = [codec.to_text(k) for k in self.r.scan_iter(match=pattern)]
        # SCAN may return a key more than once
        return list(dict.fromkeys(found))
