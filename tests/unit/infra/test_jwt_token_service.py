# tests/unit/infra/test_jwt_token_service.py
"""
Unit tests for JWTTokenService.

These tests exercise the main flows:
- issue + validate round trip
- tamper sensitivity and secret binding
- expiry boundary with an injected clock
- claim extraction and failure kinds
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from tokencache.infra.jwt.pyjwt_token_provider import JWTTokenService
from tokencache.services._shared.errors import InvalidTokenError, TokenExpiredError
from tokencache.services._shared.ports import DEFAULT_VALIDITY, TokenSettings

from tests.helpers.tokens import OTHER_SECRET, SECRET, flip_signature_byte, unsigned_token

SECOND = timedelta(seconds=1)


# ------------------------------ Round trip -------------------------------- #
@pytest.mark.parametrize("subject", ["alice", "user@example.com", "42", "名前"])
def test_issued_token_validates_for_its_subject(token_service, subject):
    token = token_service.issue_token(subject)
    assert token_service.validate_token(token, subject) is True


def test_alice_token_does_not_validate_for_bob(token_service):
    """Subject mismatch fails validation while the token itself is still live."""
    token = token_service.issue_token("alice")

    assert token_service.extract_subject(token) == "alice"
    assert token_service.validate_token(token, "bob") is False
    assert token_service.is_expired(token) is False


def test_token_is_compact_jws_with_standard_claims(token_service, clock):
    token = token_service.issue_token("alice")

    assert token.count(".") == 2
    assert jwt.get_unverified_header(token)["alg"] == "HS512"

    payload = jwt.decode(token, options={"verify_signature": False})
    issued_at = int(clock.now.timestamp())
    assert payload == {
        "sub": "alice",
        "iat": issued_at,
        "exp": issued_at + int(DEFAULT_VALIDITY.total_seconds()),
    }


# ------------------------------ Tampering --------------------------------- #
def test_any_single_signature_byte_flip_is_rejected(token_service):
    token = token_service.issue_token("alice")

    # HS512 -> 64 signature bytes
    for index in range(64):
        tampered = flip_signature_byte(token, index)
        assert token_service.validate_token(tampered, "alice") is False
        with pytest.raises(InvalidTokenError):
            token_service.extract_subject(tampered)


def test_payload_swap_is_rejected(token_service):
    """A payload from another token cannot be grafted onto a valid signature."""
    alice = token_service.issue_token("alice")
    mallory = token_service.issue_token("mallory")
    header, _, signature = mallory.split(".")
    grafted = f"{header}.{alice.split('.')[1]}.{signature}"

    assert token_service.validate_token(grafted, "alice") is False


def test_token_signed_with_other_secret_is_rejected(token_service, clock):
    other = JWTTokenService(settings=TokenSettings(secret=OTHER_SECRET), clock=clock)
    token = token_service.issue_token("alice")

    assert other.validate_token(token, "alice") is False
    with pytest.raises(InvalidTokenError):
        other.extract_subject(token)


def test_unsigned_token_is_rejected(token_service, clock):
    issued_at = int(clock.now.timestamp())
    token = unsigned_token({"sub": "alice", "iat": issued_at, "exp": issued_at + 60})

    assert token_service.validate_token(token, "alice") is False
    with pytest.raises(InvalidTokenError):
        token_service.decode(token)


def test_token_with_other_algorithm_is_rejected(token_service, clock):
    """Same secret but HS256: only the configured algorithm is accepted."""
    issued_at = int(clock.now.timestamp())
    token = jwt.encode(
        {"sub": "alice", "iat": issued_at, "exp": issued_at + 60}, SECRET, algorithm="HS256"
    )

    with pytest.raises(InvalidTokenError):
        token_service.extract_subject(token)


def test_token_missing_required_claim_is_rejected(token_service, clock):
    token = jwt.encode({"sub": "alice", "iat": int(clock.now.timestamp())}, SECRET, algorithm="HS512")

    with pytest.raises(InvalidTokenError):
        token_service.extract_subject(token)


@pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b", "a.b.c", "....", None])
def test_malformed_input_fails_closed(token_service, garbage):
    assert token_service.validate_token(garbage, "alice") is False
    with pytest.raises(InvalidTokenError):
        token_service.extract_subject(garbage)
    with pytest.raises(InvalidTokenError):
        token_service.is_expired(garbage)


def test_invalid_token_message_does_not_leak_details(token_service):
    with pytest.raises(InvalidTokenError) as excinfo:
        token_service.extract_subject("a.b.c")
    assert str(excinfo.value) == "Invalid token"
    # the library error is still reachable for operators
    assert isinstance(excinfo.value.__cause__, jwt.PyJWTError)


# ------------------------------ Expiry ------------------------------------ #
def test_expiry_boundary(token_service, clock):
    """Valid at W - 1s, expired exactly at W and after."""
    token = token_service.issue_token("alice")
    expected_expiry = clock.now + DEFAULT_VALIDITY

    clock.advance(DEFAULT_VALIDITY - SECOND)
    assert token_service.validate_token(token, "alice") is True
    assert token_service.is_expired(token) is False

    clock.advance(SECOND)
    assert token_service.is_expired(token) is True
    assert token_service.validate_token(token, "alice") is False

    clock.advance(SECOND)
    assert token_service.validate_token(token, "alice") is False
    with pytest.raises(TokenExpiredError):
        token_service.extract_subject(token)
    # expiry stays readable so callers can tell "expired" from "tampered"
    assert token_service.extract_expiry(token) == expected_expiry


def test_extract_expiry_is_issue_time_plus_window(token_service, clock):
    token = token_service.issue_token("alice")
    assert token_service.extract_expiry(token) == clock.now + DEFAULT_VALIDITY


def test_custom_validity_window(clock):
    service = JWTTokenService(
        settings=TokenSettings(secret=SECRET, validity=timedelta(minutes=1)), clock=clock
    )
    token = service.issue_token("alice")

    clock.advance(timedelta(seconds=61))
    assert service.is_expired(token) is True


def test_expired_token_signed_with_other_secret_is_invalid_not_expired(token_service, clock):
    other = JWTTokenService(settings=TokenSettings(secret=OTHER_SECRET), clock=clock)
    token = other.issue_token("alice")
    clock.advance(DEFAULT_VALIDITY * 2)

    with pytest.raises(InvalidTokenError):
        token_service.extract_subject(token)


def test_naive_clock_is_treated_as_utc(settings):
    naive = datetime(2024, 1, 1, 12, 0, 0)
    service = JWTTokenService(settings=settings, clock=lambda: naive)
    token = service.issue_token("alice")

    assert service.extract_expiry(token) == naive.replace(tzinfo=UTC) + DEFAULT_VALIDITY


# ------------------------------ Claims ------------------------------------ #
def test_custom_claims_round_trip(token_service):
    token = token_service.issue_token("alice", claims={"role": "editor", "tenant": 7})

    assert token_service.extract_claim(token, "role") == "editor"
    assert token_service.extract_claim(token, "tenant") == 7
    assert token_service.extract_claim(token, "missing") is None
    assert token_service.decode(token)["sub"] == "alice"


@pytest.mark.parametrize("reserved", ["sub", "iat", "exp"])
def test_custom_claims_cannot_override_reserved(token_service, reserved):
    with pytest.raises(ValueError):
        token_service.issue_token("alice", claims={reserved: "x"})


def test_empty_subject_is_refused(token_service):
    with pytest.raises(ValueError):
        token_service.issue_token("")


# ------------------------------ Settings ---------------------------------- #
def test_settings_reject_empty_secret():
    with pytest.raises(ValueError):
        TokenSettings(secret="")


def test_settings_reject_non_positive_validity():
    with pytest.raises(ValueError):
        TokenSettings(secret=SECRET, validity=timedelta(0))


def test_service_rejects_asymmetric_algorithm():
    with pytest.raises(ValueError):
        JWTTokenService(settings=TokenSettings(secret=SECRET, algorithm="RS256"))


def test_settings_repr_hides_secret(settings):
    assert SECRET not in repr(settings)


def test_service_is_immutable(token_service):
    with pytest.raises(AttributeError):
        token_service.settings = TokenSettings(secret="x")  # type: ignore[misc]
