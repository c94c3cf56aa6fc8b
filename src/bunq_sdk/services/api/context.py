"""Immutable per-call credential context."""
from __future__ import annotations

from dataclasses import dataclass, field, replace

from cryptography.hazmat.primitives.asymmetric import rsa

from bunq_sdk.services.crypto.pki import KeyPair

__all__ = ["ApiContext"]


@dataclass(frozen=True, slots=True)
class ApiContext:
    """Everything a call needs to sign and authenticate a request.

    ``auth_token`` holds the installation token during device and session
    registration and the session token afterwards.  Updating a token returns a
    new context.
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    public_key_pem: str = field(repr=False)
    api_key: str = field(default="", repr=False)
    auth_token: str | None = field(default=None, repr=False)
    server_public_key: str | None = field(default=None, repr=False)

    @classmethod
    def from_key_pair(cls, keys: KeyPair, *, api_key: str = "", **kw) -> "ApiContext":
        return cls(private_key=keys.private_key, public_key_pem=keys.public_key_pem, api_key=api_key, **kw)

    def with_token(self, token: str | None) -> "ApiContext":
        return replace(self, auth_token=token)

    def with_server_public_key(self, pem: str) -> "ApiContext":
        return replace(self, server_public_key=pem)

    @property
    def authenticated(self) -> bool:
        return bool(self.auth_token)
