# tokencache/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, cast

import jwt

from tokencache.services._shared.errors import InvalidTokenError, TokenExpiredError
from tokencache.services._shared.ports import RESERVED_CLAIMS, TokenProvider, TokenSettings

log = logging.getLogger(__name__)

# Only symmetric algorithms make sense with a shared secret.
SUPPORTED_ALGORITHMS = frozenset({"HS256", "HS384", "HS512"})

_REQUIRED = sorted(RESERVED_CLAIMS)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class JWTTokenService(TokenProvider):
    """
    Stateless token service backed by PyJWT.

    Tokens are compact JWS strings (``header.payload.signature``) whose payload
    carries ``sub``, ``iat`` and ``exp`` plus optional custom claims.

    Expiry policy
    -------------
    A token is valid while ``now < exp``. At ``now == exp`` it is already
    expired. No leeway is applied.

    :param settings: Immutable signing configuration (secret, algorithm, validity).
    :param clock: Returns the current time; defaults to ``datetime.now(UTC)``.
    """

    settings: TokenSettings
    clock: Callable[[], datetime] = field(default=_utc_now, compare=False)

    def __post_init__(self) -> None:
        if self.settings.algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported token algorithm: {self.settings.algorithm}")

    # -------------------- helpers --------------------

    def _now(self) -> datetime:
        now = self.clock()
        # Naive datetimes are labelled as UTC, not converted
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return now

    def _verified_claims(self, token: str) -> dict[str, Any]:
        """
        Verify structure, algorithm and signature; expiry is *not* checked here.

        :raises InvalidTokenError: On any verification failure.
        """
        try:
            claims = jwt.decode(
                token,
                self.settings.secret,
                algorithms=[self.settings.algorithm],
                options={
                    "require": _REQUIRED,
                    # Time-based claims are checked against our own clock
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.PyJWTError as exc:
            log.debug("token.rejected reason=%s", type(exc).__name__)
            raise InvalidTokenError() from exc

        if not isinstance(claims.get("sub"), str) or not isinstance(claims.get("exp"), int):
            log.debug("token.rejected reason=claim_types")
            raise InvalidTokenError()
        return cast(dict[str, Any], claims)

    def _check_not_expired(self, claims: Mapping[str, Any]) -> None:
        if int(claims["exp"]) <= self._now().timestamp():
            raise TokenExpiredError()

    # -------------------- API ------------------------

    def issue_token(self, subject: str, claims: Mapping[str, Any] | None = None) -> str:
        """
        Issue a signed token for ``subject``.

        :param subject: Identifier of the authenticated principal.
        :param claims: Extra claims; may not override ``sub``/``iat``/``exp``.
        :returns: Compact encoded token.
        :raises ValueError: On an empty subject or reserved claim override.
        """
        if not subject:
            raise ValueError("Token subject must not be empty.")
        extra = dict(claims or {})
        clash = RESERVED_CLAIMS.intersection(extra)
        if clash:
            raise ValueError(f"Custom claims may not override {sorted(clash)}.")

        issued_at = int(self._now().timestamp())
        payload: dict[str, Any] = {
            **extra,
            "sub": subject,
            "iat": issued_at,
            "exp": issued_at + int(self.settings.validity.total_seconds()),
        }
        return jwt.encode(payload, self.settings.secret, algorithm=self.settings.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Return the verified claims of a live token.

        :raises InvalidTokenError: Malformed, tampered or wrongly signed token.
        :raises TokenExpiredError: Correctly signed but expired token.
        """
        claims = self._verified_claims(token)
        self._check_not_expired(claims)
        return claims

    def validate_token(self, token: str, expected_subject: str) -> bool:
        """Return ``True`` only for a live, correctly signed token issued to ``expected_subject``."""
        try:
            claims = self.decode(token)
        except (InvalidTokenError, TokenExpiredError):
            return False
        return claims["sub"] == expected_subject

    def extract_subject(self, token: str) -> str:
        return cast(str, self.decode(token)["sub"])

    def extract_claim(self, token: str, name: str) -> Any:
        """Return claim ``name`` from a live token, or ``None`` when absent."""
        return self.decode(token).get(name)

    def extract_expiry(self, token: str) -> datetime:
        """
        Return the expiry of a correctly signed token, even if already passed.

        :raises InvalidTokenError: When the signature does not verify.
        """
        exp = int(self._verified_claims(token)["exp"])
        return datetime.fromtimestamp(exp, tz=UTC)

    def is_expired(self, token: str) -> bool:
        """``True`` when ``exp <= now``; invalid tokens raise :class:`InvalidTokenError`."""
        return self.extract_expiry(token) <= self._now()
