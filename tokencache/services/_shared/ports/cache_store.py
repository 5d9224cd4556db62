from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any, Protocol, TypeAlias, TypeVar

T = TypeVar("T")

# Seconds (int/float) or an explicit duration.
TTL: TypeAlias = int | float | timedelta


class CacheStore(Protocol):
    """
    Typed access to a remote key-value store.

    Absence is reported as ``None`` (or an empty collection), never as an
    error. Backend failures surface as :class:`~.CacheError` subclasses.
    """

    # ---- scalars ----
    def set_value(self, key: str, value: Any, ttl: TTL | None = None) -> None: ...
    def get_value(self, key: str) -> Any | None: ...
    def get_value_as(self, key: str, target: Any) -> Any | None: ...

    # ---- lifecycle ----
    def set_expiry(self, key: str, ttl: TTL) -> bool: ...
    def delete(self, key: str) -> bool: ...
    def delete_many(self, keys: Iterable[str]) -> int: ...

    # ---- ordered sequences ----
    def append_all(self, key: str, items: Iterable[Any]) -> int: ...
    def get_all(self, key: str) -> list[Any]: ...
    def get_all_as(self, key: str, target: Any) -> list[Any]: ...

    # ---- unordered sets ----
    def add_to_set(self, key: str, items: Iterable[Any]) -> int: ...
    def get_set(self, key: str) -> set[Any]: ...

    # ---- field maps ----
    def put_fields(self, key: str, fields: Mapping[str, Any] | None) -> None: ...
    def put_field(self, key: str, field: str, value: Any) -> None: ...
    def get_fields(self, key: str) -> dict[str, Any]: ...
    def get_field(self, key: str, field: str) -> Any | None: ...
    def get_field_values(self, key: str, fields: Iterable[str]) -> list[Any | None]: ...

    # ---- discovery ----
    def keys_matching(self, pattern: str) -> list[str]: ...
