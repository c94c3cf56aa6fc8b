"""Error classes raised by the API layer."""

from __future__ import annotations

from typing import Sequence


class BunqError(RuntimeError):
    """Base error for the bunq SDK."""


class UnsupportedMethodError(BunqError):
    """Raised when a resource operation is called with a method outside its allow-list."""

    def __init__(self, resource: str, method: str) -> None:
        self.resource = resource
        self.method = method
        super().__init__(f"Method not supported for {resource}: {method}")


class MissingParameterError(BunqError):
    """Raised when a required identifier is absent before a request is built."""

    def __init__(self, resource: str, parameter: str) -> None:
        self.resource = resource
        self.parameter = parameter
        super().__init__(f"{resource}: {parameter} is missing")


class ResponseVerificationError(BunqError):
    """Raised when a response signature does not match the server public key."""

    def __init__(self, *, status_code: int, request_id: str | None = None) -> None:
        self.status_code = status_code
        self.request_id = request_id
        message = f"Response verification failed (status {status_code}"
        if request_id:
            message += f", request {request_id}"
        super().__init__(message + ")")


class EnvelopeDecodeError(BunqError):
    """Raised when a response body does not have the expected envelope shape."""


class ApiErrorResponse(BunqError):
    """Raised when bunq answers with an ``Error`` envelope."""

    def __init__(self, messages: Sequence[str], *, status_code: int | None = None) -> None:
        self.messages = list(messages)
        self.status_code = status_code
        text = "; ".join(self.messages) or "unknown error"
        if status_code is not None:
            text = f"HTTP {status_code}: {text}"
        super().__init__(text)


__all__ = [
    "BunqError",
    "UnsupportedMethodError",
    "MissingParameterError",
    "ResponseVerificationError",
    "EnvelopeDecodeError",
    "ApiErrorResponse",
]
