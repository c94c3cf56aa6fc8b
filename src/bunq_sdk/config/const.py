# src/bunq_sdk/config/const.py
from __future__ import annotations

SANDBOX_URL: str = "https://sandbox.public.api.bunq.com"
PRODUCTION_URL: str = "https://api.bunq.com"
API_VERSION: str = "v1"

DEFAULT_USER_AGENT: str = "bunq-TestSerdver/1.00 sandbox/0.17b"
DEFAULT_LANGUAGE: str = "en_US"
DEFAULT_REGION: str = "en_US"
DEFAULT_GEOLOCATION: str = "0 0 0 00 NL"
DEFAULT_TIMEOUT: float = 15.0

# header names as sent on the wire
HEADER_CACHE_CONTROL: str = "Cache-Control"
HEADER_USER_AGENT: str = "User-Agent"
HEADER_LANGUAGE: str = "X-Bunq-Language"
HEADER_REGION: str = "X-Bunq-Region"
HEADER_GEOLOCATION: str = "X-Bunq-Geolocation"
HEADER_REQUEST_ID: str = "X-Bunq-Client-Request-Id"
HEADER_RESPONSE_ID: str = "X-Bunq-Client-Response-Id"
HEADER_AUTHENTICATION: str = "X-Bunq-Client-Authentication"
HEADER_CLIENT_SIGNATURE: str = "X-Bunq-Client-Signature"
HEADER_SERVER_SIGNATURE: str = "X-Bunq-Server-Signature"

VENDOR_HEADER_PREFIX: str = "X-Bunq-"

REQUEST_ID_LENGTH: int = 7
RSA_KEY_BITS: int = 2048
