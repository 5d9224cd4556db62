"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any, cast

from flask import Flask, Response, has_request_context, jsonify, request
from werkzeug.exceptions import HTTPException

from tokencache.core.logger import ensure_request_id
from tokencache.services._shared.errors import (
    CacheError,
    InvalidTokenError,
    SerializationError,
    TokenError,
    TokenExpiredError,
)

log = logging.getLogger(__name__)

# WWW-Authenticate error codes (RFC 6750) per token failure
_BEARER_ERRORS = {
    TokenExpiredError: ("token_expired", "The access token expired"),
    InvalidTokenError: ("invalid_token", "The access token is invalid"),
}


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if has_request_context() else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case. Defaults to
        ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """Serialize error metadata into an RFC 7807 problem."""
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class Unauthorized(APIError):
    """401 when authentication fails."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


class ServiceUnavailable(APIError):
    """503 when a backing service cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, status_code=HTTPStatus.SERVICE_UNAVAILABLE, code="cache_unavailable")


def translate_exception(exc: Exception) -> Exception:
    """
    Map service-level errors to API-level (HTTP) errors.

    :param exc: Exception raised by a token or cache operation.
    :returns: Translated exception; unknown exceptions are returned untouched.
    """
    if isinstance(exc, TokenError):
        code, message = _BEARER_ERRORS.get(type(exc), ("invalid_token", "The access token is invalid"))
        return Unauthorized(message, code=code)

    if isinstance(exc, SerializationError):
        # Stored data does not match what the code expects: a server-side fault
        return APIError(
            "Cached value could not be decoded",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="serialization_failed",
        )

    if isinstance(exc, CacheError):
        return ServiceUnavailable()

    return exc


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            problem.get("request_id"),
        )
        resp = _problem_response(problem)
        if err.status_code == HTTPStatus.UNAUTHORIZED:
            resp.headers["WWW-Authenticate"] = f'Bearer error="{err.code}"'
        return resp, err.status_code

    @app.errorhandler(TokenError)
    def handle_token_error(err: TokenError):
        return handle_api_error(cast(APIError, translate_exception(err)))

    @app.errorhandler(CacheError)
    def handle_cache_error(err: CacheError):
        api_err = cast(APIError, translate_exception(err))
        # Cause is chained on the CacheError; keep it for operators
        log.error(
            "CacheError: operation=%s key=%s request_id=%s",
            err.operation,
            err.key,
            ensure_request_id(),
            exc_info=err,
        )
        return handle_api_error(api_err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem.get("request_id"),
        )
        return _problem_response(problem), status

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error(
            "Unhandled exception: request_id=%s",
            problem.get("request_id"),
            exc_info=True,
        )
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
