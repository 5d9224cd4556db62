"""Shared API helpers for bearer-token authentication."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import g, request

from tokencache.core.errors import Unauthorized
from tokencache.core.extensions import get_token_service
from tokencache.services._shared.errors import InvalidTokenError

F = TypeVar("F", bound=Callable[..., Any])

BEARER_PREFIX = "bearer "


def bearer_token() -> str:
    """Return the token from ``Authorization: Bearer <token>``.

    :raises Unauthorized: When the header is missing or not a bearer credential.
    """
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        raise Unauthorized("Missing bearer token")
    token = header[len(BEARER_PREFIX) :].strip()
    if not token:
        raise Unauthorized("Missing bearer token")
    return token


def current_subject() -> str | None:
    """Subject verified by :func:`require_subject` for this request, if any."""
    return cast(str | None, getattr(g, "subject", None))


def require_subject(func: F) -> F:
    """Ensure the request carries a live token; expose its subject on ``g.subject``.

    Expired tokens raise :class:`TokenExpiredError` and everything else
    :class:`InvalidTokenError`; both are rendered as 401 by the error handlers.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        tokens = get_token_service()
        subject = tokens.extract_subject(bearer_token())
        if not subject:
            raise InvalidTokenError()
        g.subject = subject
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
