"""Canonical strings for request signing and response verification.

Requests are signed over::

    <METHOD> <URI>\\n
    <Header>: <value>\\n        (X-Bunq-*, Cache-Control, User-Agent; sorted)
    \\n
    <body>

Responses are verified over a narrower string that only covers the status
code, the request and response ids and the body.  The server computes the same
narrow string, so the two halves must stay asymmetric.
"""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Iterable, Mapping

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from bunq_sdk.config.const import (
    HEADER_CACHE_CONTROL,
    HEADER_REQUEST_ID,
    HEADER_RESPONSE_ID,
    HEADER_SERVER_SIGNATURE,
    HEADER_USER_AGENT,
    VENDOR_HEADER_PREFIX,
)
from bunq_sdk.services.crypto.pki import load_public_key

__all__ = [
    "SIGNED_INFRA_HEADERS",
    "is_signed_header",
    "signed_headers",
    "request_string",
    "sign_request",
    "response_string",
    "verify_response",
]

_log = logging.getLogger(__name__)

SIGNED_INFRA_HEADERS = frozenset({HEADER_CACHE_CONTROL, HEADER_USER_AGENT})


def is_signed_header(name: str) -> bool:
    return name.startswith(VENDOR_HEADER_PREFIX) or name in SIGNED_INFRA_HEADERS


def signed_headers(headers: Mapping[str, str]) -> list[tuple[str, str]]:
    """Headers covered by the request signature, in ordinal key order."""

    return sorted((str(k), str(v)) for k, v in headers.items() if is_signed_header(str(k)))


def _header_lines(items: Iterable[tuple[str, str]]) -> str:
    return "".join(f"{key}: {value}\n" for key, value in items)


def request_string(method: str, uri: str, headers: Mapping[str, str], body: str | None = None) -> str:
    text = f"{method} {uri}\n"
    text += _header_lines(signed_headers(headers))
    text += "\n"
    if body:
        text += body
    return text


def sign_request(
    private_key: rsa.RSAPrivateKey,
    method: str,
    uri: str,
    headers: Mapping[str, str],
    body: str | None = None,
) -> str:
    """Return the base64 RSA-SHA256 signature of the request canonical string."""

    data = request_string(method, uri, headers, body).encode("utf-8")
    signature = private_key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


def _lookup(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def response_string(status_code: int, headers: Mapping[str, str], body: str) -> str:
    text = f"{int(status_code)}\n"
    text += f"{HEADER_REQUEST_ID}: {_lookup(headers, HEADER_REQUEST_ID)}\n"
    text += f"{HEADER_RESPONSE_ID}: {_lookup(headers, HEADER_RESPONSE_ID)}\n"
    text += "\n"
    text += body
    return text


def verify_response(
    server_public_key: str | rsa.RSAPublicKey,
    status_code: int,
    headers: Mapping[str, str],
    body: str,
) -> bool:
    """Check the server signature of a response.

    Returns ``False`` on any mismatch, a missing signature header or a
    signature that is not valid base64.
    """

    key = load_public_key(server_public_key) if isinstance(server_public_key, (str, bytes)) else server_public_key
    encoded = _lookup(headers, HEADER_SERVER_SIGNATURE)
    if not encoded:
        _log.warning("response carries no %s header", HEADER_SERVER_SIGNATURE)
        return False
    try:
        signature = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        _log.warning("server signature is not valid base64")
        return False

    data = response_string(status_code, headers, body).encode("utf-8")
    try:
        key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
    except InvalidSignature:
        return False
    return True
