"""Client SDK for the bunq public API: request signing, response verification
and installation/session bootstrapping."""

from __future__ import annotations

from .config import BunqSettings, load_settings
from .services.api import (
    ApiContext,
    ApiResponse,
    BunqApiClient,
    BunqError,
    HttpMethod,
    ResponseVerificationError,
    decode_envelope,
    ensure_verified,
)
from .services.bootstrap import BunqBootstrap
from .services.crypto import KeyPair, generate_key_pair, load_key_pair
from .services.signing import sign_request, verify_response
from .services.storage import CredentialStore

__version__ = "0.1.0"

__all__ = [
    "ApiContext",
    "ApiResponse",
    "BunqApiClient",
    "BunqBootstrap",
    "BunqError",
    "BunqSettings",
    "CredentialStore",
    "HttpMethod",
    "KeyPair",
    "ResponseVerificationError",
    "decode_envelope",
    "ensure_verified",
    "generate_key_pair",
    "load_key_pair",
    "load_settings",
    "sign_request",
    "verify_response",
]
