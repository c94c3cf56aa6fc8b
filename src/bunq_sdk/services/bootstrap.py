"""Sequential setup of a bunq API session.

The waterfall mirrors what a fresh client has to do before it can call
authenticated endpoints:

1. load or generate the RSA key pair;
2. load the installation token and server public key, or create an
   installation and register this device with it;
3. load the session token, or open a session with the installation token.

Every step persists its result through :class:`CredentialStore`, so reruns
skip the steps that already happened.  Any response that fails signature
verification aborts the flow with :class:`ResponseVerificationError`.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import secrets
import string

from bunq_sdk.config.settings import BunqSettings
from bunq_sdk.services.api.client import ApiResponse, BunqApiClient, ensure_verified
from bunq_sdk.services.api.context import ApiContext
from bunq_sdk.services.api.envelope import ResponseEnvelope
from bunq_sdk.services.api.errors import BunqError
from bunq_sdk.services.api.models import (
    USER_TYPES,
    CredentialPasswordIp,
    Id,
    MonetaryAccountBank,
    Token,
    User,
)
from bunq_sdk.services.crypto.pki import KeyPair, generate_key_pair
from bunq_sdk.services.storage.state import INSTALLATION_TOKEN, SERVER_PUBLIC_KEY, SESSION_TOKEN, CredentialStore

__all__ = ["BunqBootstrap", "device_description"]

_log = logging.getLogger(__name__)


def device_description(length: int = 10) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


@dataclass(slots=True)
class BunqBootstrap:
    client: BunqApiClient
    store: CredentialStore
    api_key: str
    passphrase: bytes | None = None

    @classmethod
    def from_settings(cls, settings: BunqSettings, **client_overrides) -> "BunqBootstrap":
        return cls(
            client=settings.client(**client_overrides),
            store=CredentialStore(settings.state_dir),
            api_key=settings.api_key,
            passphrase=settings.passphrase_bytes,
        )

    # ---------- waterfall ----------------------------------------------------
    def ensure_keys(self) -> KeyPair:
        if self.store.has_keys():
            _log.info("using stored key pair from %s", self.store.base_dir)
            return self.store.load_keys(self.passphrase)
        _log.info("generating new key pair in %s", self.store.base_dir)
        return self.store.save_keys(generate_key_pair(), self.passphrase)

    def context(self, keys: KeyPair) -> ApiContext:
        return ApiContext.from_key_pair(keys, api_key=self.api_key)

    async def ensure_installation(self, ctx: ApiContext) -> ApiContext:
        """Return ``ctx`` carrying the installation token and server public key."""

        if self.store.has_installation():
            _log.info("using stored installation")
            return ctx.with_token(self.store.require(INSTALLATION_TOKEN)).with_server_public_key(
                self.store.require(SERVER_PUBLIC_KEY)
            )

        _log.info("creating installation")
        result = await self.client.post_installation(ctx.with_token(None))
        installed = ctx.with_token(result.token).with_server_public_key(result.server_public_key)

        _log.info("registering device server")
        response = await self.client.post_device_server(installed, device_description())
        self._verified(installed, response)
        # only a registered device makes the installation reusable
        self.store.save_installation(result.token, result.server_public_key)
        return installed

    async def ensure_session(self, ctx: ApiContext) -> ApiContext:
        """Return ``ctx`` carrying a session token instead of the installation token."""

        if self.store.has_session():
            _log.info("using stored session token")
            return ctx.with_token(self.store.require(SESSION_TOKEN))

        _log.info("opening session")
        response = ensure_verified(await self.client.post_session_server(ctx), ctx.server_public_key)
        token = response.decode().first(Token).token
        self.store.save_session(token)
        return ctx.with_token(token)

    async def run(self) -> ApiContext:
        if not self.api_key:
            raise BunqError("an API key is required to register a device and open a session")
        ctx = self.context(self.ensure_keys())
        ctx = await self.ensure_installation(ctx)
        return await self.ensure_session(ctx)

    # ---------- verified lookups ---------------------------------------------
    def _verified(self, ctx: ApiContext, response: ApiResponse) -> ResponseEnvelope:
        return ensure_verified(response, ctx.server_public_key).decode()

    async def fetch_user(self, ctx: ApiContext) -> User:
        envelope = self._verified(ctx, await self.client.user(ctx))
        return envelope.first(*USER_TYPES)

    async def fetch_user_id(self, ctx: ApiContext) -> int:
        return (await self.fetch_user(ctx)).id

    async def list_monetary_accounts(self, ctx: ApiContext, user_id: int | str) -> list[MonetaryAccountBank]:
        envelope = self._verified(ctx, await self.client.monetary_account(ctx, user_id=user_id))
        return envelope.all(MonetaryAccountBank)

    async def list_permitted_ips(self, ctx: ApiContext, user_id: int | str) -> list[CredentialPasswordIp]:
        envelope = self._verified(ctx, await self.client.credential_password_ip(ctx, user_id=user_id))
        return envelope.all(CredentialPasswordIp)

    async def add_permitted_ip(self, ctx: ApiContext, user_id: int | str, ip_id: int | str, ip: str) -> int:
        response = await self.client.post_permitted_ip(ctx, user_id, ip_id, ip)
        envelope = self._verified(ctx, response)
        return envelope.first(Id).id
