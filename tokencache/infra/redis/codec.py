"""JSON transport codec: one encode/decode pair per value shape.

Every value stored through the cache facade is written as JSON text. The
functions below raise :class:`SerializationError` instead of leaking
``TypeError``/``ValueError`` from the JSON layer or from type coercion.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Mapping
from typing import Any

from marshmallow import Schema, ValidationError

from tokencache.services._shared.errors import SerializationError

Raw = str | bytes | bytearray


def to_text(raw: Raw) -> str:
    return raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)


def _default(obj: Any) -> Any:
    """Fallback encoder for dataclasses and sets."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, set | frozenset):
        return sorted(obj, key=repr)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


# --------------------------------------------------------------------------- #
# Scalars
# --------------------------------------------------------------------------- #


def encode_value(value: Any, *, operation: str = "encode", key: str | None = None) -> str:
    """Encode a single value as JSON text."""
    try:
        return json.dumps(value, default=_default, separators=(",", ":"), sort_keys=True)
    except (TypeError, ValueError) as exc:
        raise SerializationError(operation, key, f"Cannot encode value: {exc}") from exc


def decode_value(raw: Raw | None, *, operation: str = "decode", key: str | None = None) -> Any:
    """Decode JSON text; ``None`` (absent) stays ``None``."""
    if raw is None:
        return None
    try:
        return json.loads(to_text(raw))
    except (TypeError, ValueError) as exc:
        raise SerializationError(operation, key, "Stored value is not valid JSON") from exc


# --------------------------------------------------------------------------- #
# Sequences and sets
# --------------------------------------------------------------------------- #


def encode_items(items: Iterable[Any], *, operation: str = "encode", key: str | None = None) -> list[str]:
    return [encode_value(item, operation=operation, key=key) for item in items]


def decode_items(raws: Iterable[Raw], *, operation: str = "decode", key: str | None = None) -> list[Any]:
    return [decode_value(raw, operation=operation, key=key) for raw in raws]


def decode_members(raws: Iterable[Raw], *, operation: str = "decode", key: str | None = None) -> set[Any]:
    members: set[Any] = set()
    for value in decode_items(raws, operation=operation, key=key):
        try:
            members.add(value)
        except TypeError as exc:
            raise SerializationError(
                operation, key, f"Set member of type {type(value).__name__} is not hashable"
            ) from exc
    return members


# --------------------------------------------------------------------------- #
# Field maps
# --------------------------------------------------------------------------- #


def encode_fields(
    fields: Mapping[str, Any], *, operation: str = "encode", key: str | None = None
) -> dict[str, str]:
    return {str(name): encode_value(value, operation=operation, key=key) for name, value in fields.items()}


def decode_fields(
    raws: Mapping[Raw, Raw], *, operation: str = "decode", key: str | None = None
) -> dict[str, Any]:
    return {to_text(name): decode_value(raw, operation=operation, key=key) for name, raw in raws.items()}


# --------------------------------------------------------------------------- #
# Typed coercion
# --------------------------------------------------------------------------- #


# JSON scalar types are matched exactly, never converted
_STRICT_SCALARS = (bool, int, float, str)


def _check_scalar(value: Any, target: type) -> Any:
    if isinstance(value, bool) and target is not bool:
        raise TypeError(f"expected {target.__name__}, got bool")
    if target is float and isinstance(value, int):
        return float(value)
    if not isinstance(value, target):
        raise TypeError(f"expected {target.__name__}, got {type(value).__name__}")
    return value


def coerce(value: Any, target: Any, *, operation: str = "coerce", key: str | None = None) -> Any:
    """
    Coerce a decoded JSON value into ``target``.

    ``bool``, ``int``, ``float`` and ``str`` only accept values already of
    that JSON type (an integer is accepted as ``float``). Other callables,
    such as ``Decimal``, receive the value as their constructor argument.

    :param target: A marshmallow ``Schema`` (class or instance), a dataclass,
        or any callable type such as ``int`` or ``Decimal``.
    :raises SerializationError: When the value does not fit the target.
    """
    try:
        if target in _STRICT_SCALARS:
            return _check_scalar(value, target)
        if isinstance(target, Schema):
            return target.load(value)
        if isinstance(target, type) and issubclass(target, Schema):
            return target().load(value)
        if isinstance(target, type) and isinstance(value, target):
            return value
        if dataclasses.is_dataclass(target) and isinstance(target, type):
            if not isinstance(value, Mapping):
                raise TypeError(f"expected an object, got {type(value).__name__}")
            return target(**value)
        return target(value)
    except (ValidationError, TypeError, ValueError, ArithmeticError) as exc:
        name = getattr(target, "__name__", type(target).__name__)
        raise SerializationError(operation, key, f"Cannot coerce value into {name}") from exc
