#!/usr/bin/env python
"""Error taxonomy and the Flask handlers that map it onto HTTP responses."""

from __future__ import annotations

from typing import Dict, Iterable, Optional

from flask import Flask, Response, jsonify


UNAUTHORIZED_BODY = "Unauthorized"
INTERNAL_ERROR_BODY = "Internal server error"


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing configuration values: {', '.join(self.missing)}")


class UpstreamError(Exception):
    """A failed call to the Spotify accounts service or Web API."""

    def __init__(self, status: Optional[int], message: str, *, operation: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.operation = operation

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def __str__(self) -> str:
        return f"{self.message} [{self.status}]"


class RequestValidationError(ValueError):
    """Query parameters did not match the expected request shape."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("invalid request parameters")
        self.errors = errors


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(UpstreamError)
    def _handle_upstream(exc: UpstreamError):
        app.logger.warning(
            "Something went wrong! [%s %s]",
            exc.message,
            exc.status,
            extra={"operation": exc.operation},
        )
        if exc.is_unauthorized:
            return _text(UNAUTHORIZED_BODY, 401)
        return _text(INTERNAL_ERROR_BODY, 500)

    @app.errorhandler(RequestValidationError)
    def _handle_validation(exc: RequestValidationError):
        return jsonify({"error": "invalid_parameters", "errors": exc.errors}), 400


__all__ = [
    "ConfigurationError",
    "UpstreamError",
    "RequestValidationError",
    "register_error_handlers",
    "UNAUTHORIZED_BODY",
    "INTERNAL_ERROR_BODY",
]
