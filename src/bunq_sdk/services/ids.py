"""Identifiers attached to outgoing requests."""
from __future__ import annotations

import secrets
import string
from typing import NewType

from bunq_sdk.config.const import REQUEST_ID_LENGTH

__all__ = ["RequestId", "generate_request_id"]

RequestId = NewType("RequestId", str)

_ALPHABET = string.ascii_letters + string.digits


def generate_request_id(length: int = REQUEST_ID_LENGTH) -> RequestId:
    """Return a random alphanumeric request id (7 characters by default)."""

    if length <= 0:
        raise ValueError("request id length must be positive")
    return RequestId("".join(secrets.choice(_ALPHABET) for _ in range(length)))
