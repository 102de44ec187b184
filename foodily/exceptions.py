from __future__ import annotations

from typing import Any, Mapping


class FoodilyError(Exception):
    """Base class for errors the API renders as JSON.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context
        http_status: status code used by the exception handler
    """

    http_status = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None, details: Mapping[str, Any] | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(FoodilyError):
    """Input is well-formed but violates a precondition of the operation."""

    http_status = 400
    default_message = "Invalid input"


class ForbiddenError(FoodilyError):
    """The caller does not own the document it tried to change."""

    http_status = 403
    default_message = "Not allowed"


class NotFoundError(FoodilyError):
    http_status = 404
    default_message = "Not found"


class AIServiceError(FoodilyError):
    """The generative-AI API failed after all retries."""

    http_status = 502
    default_message = "The AI service failed to answer"


class AIUnavailableError(FoodilyError):
    """No API key is configured for the AI feature that was requested."""

    http_status = 503
    default_message = "The AI service is not configured"


class ConflictError(FoodilyError):
    http_status = 409
    default_message = "Conflict"
