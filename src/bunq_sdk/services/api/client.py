# src/bunq_sdk/services/api/client.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Mapping
import json
import logging
import ssl

import httpx

from bunq_sdk.config import const
from bunq_sdk.services.ids import generate_request_id
from bunq_sdk.services.signing.canonical import sign_request, verify_response

from .context import ApiContext
from .enums import HttpMethod
from .envelope import ResponseEnvelope, decode_envelope
from .errors import MissingParameterError, ResponseVerificationError, UnsupportedMethodError
from .models import Id, ServerPublicKey, Token

_log = logging.getLogger(__name__)

Identifier = int | str


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """A fully built request: what gets signed is exactly what gets sent."""

    method: str
    uri: str
    url: str
    headers: dict[str, str]
    body: str | None = None

    @property
    def request_id(self) -> str | None:
        return self.headers.get(const.HEADER_REQUEST_ID)

    @property
    def content(self) -> bytes | None:
        return self.body.encode("utf-8") if self.body is not None else None


@dataclass(frozen=True, slots=True)
class ApiResponse:
    status_code: int
    headers: httpx.Headers
    body: str

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "ApiResponse":
        return cls(status_code=response.status_code, headers=response.headers, body=response.text)

    @property
    def request_id(self) -> str | None:
        return self.headers.get(const.HEADER_REQUEST_ID)

    @property
    def response_id(self) -> str | None:
        return self.headers.get(const.HEADER_RESPONSE_ID)

    def decode(self) -> ResponseEnvelope:
        return decode_envelope(self.body, status_code=self.status_code)

    def verify(self, server_public_key: str) -> bool:
        return verify_response(server_public_key, self.status_code, self.headers, self.body)


def ensure_verified(response: ApiResponse, server_public_key: str | None) -> ApiResponse:
    """Return ``response`` if its server signature checks out, raise otherwise."""

    if not server_public_key or not response.verify(server_public_key):
        _log.warning("response verification failed status=%s request_id=%s", response.status_code, response.request_id)
        raise ResponseVerificationError(status_code=response.status_code, request_id=response.request_id)
    return response


@dataclass(frozen=True, slots=True)
class InstallationResult:
    token: str
    server_public_key: str
    installation_id: int | None = None


def _given(value: Identifier | None) -> bool:
    return value is not None and str(value) != ""


def _require_method(resource: str, method: str | HttpMethod, allowed: Collection[HttpMethod]) -> HttpMethod:
    resolved = HttpMethod.coerce(method)
    if resolved is None or resolved not in allowed:
        raise UnsupportedMethodError(resource, str(method))
    return resolved


def _require_param(resource: str, name: str, value: Identifier | None) -> str:
    if not _given(value):
        raise MissingParameterError(resource, name)
    return str(value)


def serialize_body(body: Any) -> str:
    """Compact JSON with insertion order preserved, as signed and sent."""

    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


@dataclass(slots=True)
class BunqApiClient:
    """Signing HTTP client for the bunq public API.

    The client holds connection settings only.  Keys and tokens travel in the
    :class:`ApiContext` passed to every call.
    """

    base_url: str = const.SANDBOX_URL
    api_version: str = const.API_VERSION
    timeout: float = const.DEFAULT_TIMEOUT
    verify: str | bool | ssl.SSLContext = True
    user_agent: str = const.DEFAULT_USER_AGENT
    language: str = const.DEFAULT_LANGUAGE
    region: str = const.DEFAULT_REGION
    geolocation: str = const.DEFAULT_GEOLOCATION
    # injected by tests (httpx.MockTransport)
    transport: httpx.AsyncBaseTransport | None = None
    request_id_factory: Callable[[], str] = field(default=generate_request_id)

    # ---------- request assembly ---------------------------------------------
    def default_headers(self, ctx: ApiContext) -> dict[str, str]:
        headers = {
            const.HEADER_CACHE_CONTROL: "no-cache",
            const.HEADER_USER_AGENT: self.user_agent,
            const.HEADER_LANGUAGE: self.language,
            const.HEADER_REGION: self.region,
            const.HEADER_GEOLOCATION: self.geolocation,
            const.HEADER_REQUEST_ID: self.request_id_factory(),
        }
        if ctx.auth_token:
            headers[const.HEADER_AUTHENTICATION] = ctx.auth_token
        return headers

    def uri_for(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return f"/{self.api_version}{path}"

    def build_request(
        self,
        ctx: ApiContext,
        method: str | HttpMethod,
        path: str,
        body: Any | None = None,
    ) -> SignedRequest:
        verb = str(method).upper()
        uri = self.uri_for(path)
        headers = self.default_headers(ctx)
        payload = serialize_body(body) if body is not None and verb != HttpMethod.GET.value else None
        headers[const.HEADER_CLIENT_SIGNATURE] = sign_request(ctx.private_key, verb, uri, headers, payload)
        return SignedRequest(
            method=verb,
            uri=uri,
            url=self.base_url.rstrip("/") + uri,
            headers=headers,
            body=payload,
        )

    # ---------- transport ----------------------------------------------------
    async def send(self, request: SignedRequest) -> ApiResponse:
        _log.debug("%s %s request_id=%s", request.method, request.uri, request.request_id)
        async with httpx.AsyncClient(timeout=self.timeout, verify=self.verify, transport=self.transport) as client:
            response = await client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content,
            )
        _log.debug("%s %s -> %s", request.method, request.uri, response.status_code)
        return ApiResponse.from_httpx(response)

    async def call(
        self,
        ctx: ApiContext,
        method: str | HttpMethod,
        path: str,
        body: Any | None = None,
    ) -> ApiResponse:
        return await self.send(self.build_request(ctx, method, path, body))

    # ---------- installation -------------------------------------------------
    async def installation(
        self,
        ctx: ApiContext,
        method: str | HttpMethod,
        *,
        id: Identifier | None = None,
    ) -> ApiResponse:
        verb = _require_method("installation", method, {HttpMethod.GET, HttpMethod.POST})
        if verb is HttpMethod.POST:
            return await self.call(ctx, verb, "/installation", {"client_public_key": ctx.public_key_pem})
        if _given(id):
            return await self.call(ctx, verb, f"/installation/{id}")
        return await self.call(ctx, verb, "/installation")

    async def installation_server_public_key(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.GET,
        *,
        id: Identifier | None = None,
    ) -> ApiResponse:
        verb = _require_method("installation server-public-key", method, {HttpMethod.GET})
        installation_id = _require_param("installation server-public-key", "installation id", id)
        return await self.call(ctx, verb, f"/installation/{installation_id}/server-public-key")

    async def post_installation(self, ctx: ApiContext) -> InstallationResult:
        response = await self.installation(ctx, HttpMethod.POST)
        envelope = response.decode()
        installation_id: int | None = None
        ids = envelope.all(Id)
        if ids:
            installation_id = ids[0].id
        return InstallationResult(
            token=envelope.first(Token).token,
            server_public_key=envelope.first(ServerPublicKey).server_public_key,
            installation_id=installation_id,
        )

    # ---------- devices ------------------------------------------------------
    async def device(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.GET,
        *,
        id: Identifier | None = None,
    ) -> ApiResponse:
        verb = _require_method("device", method, {HttpMethod.GET})
        if _given(id):
            return await self.call(ctx, verb, f"/device/{id}")
        return await self.call(ctx, verb, "/device")

    async def device_server(
        self,
        ctx: ApiContext,
        method: str | HttpMethod,
        *,
        id: Identifier | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        verb = _require_method("device-server", method, {HttpMethod.GET, HttpMethod.POST})
        if verb is HttpMethod.POST:
            return await self.call(ctx, verb, "/device-server", dict(body or {}))
        if _given(id):
            return await self.call(ctx, verb, f"/device-server/{id}")
        return await self.call(ctx, verb, "/device-server")

    async def post_device_server(
        self,
        ctx: ApiContext,
        description: str,
        *,
        permitted_ips: list[str] | None = None,
    ) -> ApiResponse:
        body: dict[str, Any] = {"description": description, "secret": ctx.api_key}
        if permitted_ips is not None:
            body["permitted_ips"] = list(permitted_ips)
        return await self.device_server(ctx, HttpMethod.POST, body=body)

    # ---------- session ------------------------------------------------------
    async def session_server(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.POST,
        *,
        body: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        verb = _require_method("session-server", method, {HttpMethod.POST})
        return await self.call(ctx, verb, "/session-server", dict(body or {}))

    async def post_session_server(self, ctx: ApiContext) -> ApiResponse:
        return await self.session_server(ctx, HttpMethod.POST, body={"secret": ctx.api_key})

    # ---------- users & accounts --------------------------------------------
    async def user(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.GET,
        *,
        id: Identifier | None = None,
    ) -> ApiResponse:
        verb = _require_method("user", method, {HttpMethod.GET})
        if _given(id):
            return await self.call(ctx, verb, f"/user/{id}")
        return await self.call(ctx, verb, "/user")

    async def monetary_account(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.GET,
        *,
        user_id: Identifier | None = None,
        id: Identifier | None = None,
    ) -> ApiResponse:
        verb = _require_method("monetary-account", method, {HttpMethod.GET})
        owner = _require_param("monetary-account", "user id", user_id)
        if _given(id):
            return await self.call(ctx, verb, f"/user/{owner}/monetary-account/{id}")
        return await self.call(ctx, verb, f"/user/{owner}/monetary-account")

    # ---------- permitted IPs ------------------------------------------------
    async def credential_password_ip(
        self,
        ctx: ApiContext,
        method: str | HttpMethod = HttpMethod.GET,
        *,
        user_id: Identifier | None = None,
        ip_id: Identifier | None = None,
        body: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        verb = _require_method("credential-password-ip", method, {HttpMethod.GET, HttpMethod.POST})
        owner = _require_param("credential-password-ip", "user id", user_id)
        if verb is HttpMethod.POST:
            credential = _require_param("credential-password-ip", "ip id", ip_id)
            if not body or not body.get("ip"):
                raise MissingParameterError("credential-password-ip", "ip")
            return await self.call(ctx, verb, f"/user/{owner}/credential-password-ip/{credential}/ip", dict(body))
        if _given(ip_id):
            return await self.call(ctx, verb, f"/user/{owner}/credential-password-ip/{ip_id}/ip")
        return await self.call(ctx, verb, f"/user/{owner}/credential-password-ip")

    async def post_permitted_ip(
        self,
        ctx: ApiContext,
        user_id: Identifier,
        ip_id: Identifier,
        ip: str,
        *,
        status: str = "ACTIVE",
    ) -> ApiResponse:
        return await self.credential_password_ip(
            ctx,
            HttpMethod.POST,
            user_id=user_id,
            ip_id=ip_id,
            body={"ip": ip, "status": status},
        )


__all__ = [
    "ApiResponse",
    "BunqApiClient",
    "InstallationResult",
    "SignedRequest",
    "ensure_verified",
    "serialize_body",
]
