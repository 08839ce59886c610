"""Error taxonomy shared by services and routes.

Services raise these exceptions; ``app.main`` renders them as JSON bodies of
the form ``{"error": message, "kind": kind}`` with the matching status code.
"""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    status_code = 500
    kind = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind}


class Unauthorized(AppError):
    """No session, or the session is no longer valid."""

    status_code = 401
    kind = "unauthorized"


class Forbidden(AppError):
    """Valid session without the required role, or a self-protection rule."""

    status_code = 403
    kind = "forbidden"


class NotFound(AppError):
    status_code = 404
    kind = "not_found"


class ValidationFailed(AppError):
    status_code = 400
    kind = "validation"


class InvalidAction(ValidationFailed):
    kind = "invalid_action"


class Conflict(AppError):
    status_code = 409
    kind = "conflict"


class UpstreamFailure(AppError):
    """The AI provider or an imported site failed or answered garbage."""

    status_code = 502
    kind = "upstream_failure"

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        super().__init__(message)
        self.raw_response = raw_response

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.raw_response is not None:
            payload["rawResponse"] = self.raw_response
        return payload


class InternalError(AppError):
    status_code = 500
    kind = "internal_error"
