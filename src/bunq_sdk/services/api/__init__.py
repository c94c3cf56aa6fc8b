"""bunq API dispatcher, context and response envelope."""
from .client import ApiResponse, BunqApiClient, InstallationResult, SignedRequest, ensure_verified
from .context import ApiContext
from .enums import HttpMethod
from .envelope import ResponseEnvelope, ResponseItem, decode_envelope
from .errors import (
    ApiErrorResponse,
    BunqError,
    EnvelopeDecodeError,
    MissingParameterError,
    ResponseVerificationError,
    UnsupportedMethodError,
)

__all__ = [
    "ApiContext",
    "ApiErrorResponse",
    "ApiResponse",
    "BunqApiClient",
    "BunqError",
    "EnvelopeDecodeError",
    "HttpMethod",
    "InstallationResult",
    "MissingParameterError",
    "ResponseEnvelope",
    "ResponseItem",
    "ResponseVerificationError",
    "SignedRequest",
    "UnsupportedMethodError",
    "decode_envelope",
    "ensure_verified",
]
