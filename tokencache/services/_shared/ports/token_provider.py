from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

# Algorithm used when none is configured.
DEFAULT_ALGORITHM = "HS512"

# Fixed validity window applied to every issued token.
DEFAULT_VALIDITY = timedelta(hours=5)

# Claim names reserved by the token format itself.
RESERVED_CLAIMS = frozenset({"sub", "iat", "exp"})


@dataclass(frozen=True, slots=True)
class TokenSettings:
    """
    Immutable signing configuration injected into a token provider.

    :ivar secret: Shared HMAC secret. Rotating it invalidates every issued token.
    :ivar algorithm: Signing algorithm identifier (``HS512`` by default).
    :ivar validity: Lifetime of each issued token.
    """

    secret: str | bytes = field(repr=False)
    algorithm: str = DEFAULT_ALGORITHM
    validity: timedelta = DEFAULT_VALIDITY

    def __post_init__(self) -> None:
        if not self.secret:
            raise ValueError("Token secret must not be empty.")
        if self.validity <= timedelta(0):
            raise ValueError("Token validity must be positive.")


class TokenProvider(Protocol):
    """Port for issuing and verifying compact signed tokens."""

    def issue_token(self, subject: str, claims: Mapping[str, Any] | None = None) -> str: ...

    def validate_token(self, token: str, expected_subject: str) -> bool: ...

    def decode(self, token: str) -> dict[str, Any]: ...

    def extract_subject(self, token: str) -> str: ...

    def extract_expiry(self, token: str) -> datetime: ...

    def extract_claim(self, token: str, name: str) -> Any: ...

    def is_expired(self, token: str) -> bool: ...
