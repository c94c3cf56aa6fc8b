from __future__ import annotations

import base64
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from bunq_sdk.services.api import ApiContext, BunqApiClient
from bunq_sdk.services.crypto.pki import KeyPair, generate_key_pair


@pytest.fixture(scope="session")
def client_keys() -> KeyPair:
    return generate_key_pair()


@pytest.fixture(scope="session")
def server_keys() -> KeyPair:
    return generate_key_pair()


@pytest.fixture()
def api_context(client_keys: KeyPair, server_keys: KeyPair) -> ApiContext:
    return ApiContext.from_key_pair(client_keys, api_key="sandbox-api-key").with_server_public_key(
        server_keys.public_key_pem
    )


def sign_server_response(keys: KeyPair, status: int, request_id: str, response_id: str, body: str) -> str:
    text = (
        f"{status}\n"
        f"X-Bunq-Client-Request-Id: {request_id}\n"
        f"X-Bunq-Client-Response-Id: {response_id}\n"
        "\n"
        f"{body}"
    )
    signature = keys.private_key.sign(text.encode("utf-8"), padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


Reply = tuple[int, Any]


@dataclass
class FakeBunq:
    """Minimal in-process bunq: canned replies per (method, path), signed with the server key."""

    server_keys: KeyPair
    routes: dict[tuple[str, str], Reply | Callable[[httpx.Request], Reply]] = field(default_factory=dict)
    requests: list[httpx.Request] = field(default_factory=list)
    tamper: bool = False

    def reply(self, method: str, path: str, status: int, response: Any) -> None:
        self.routes[(method, path)] = (status, response)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            status, payload = 404, {"Error": [{"error_description": "Route not found"}]}
        elif callable(route):
            status, payload = route(request)
        else:
            status, payload = route
        body = payload if isinstance(payload, str) else json.dumps(payload)
        request_id = request.headers.get("X-Bunq-Client-Request-Id", "")
        response_id = str(uuid.uuid4())
        signature = sign_server_response(self.server_keys, status, request_id, response_id, body)
        if self.tamper:
            body = body + " "
        headers = {
            "X-Bunq-Client-Request-Id": request_id,
            "X-Bunq-Client-Response-Id": response_id,
            "X-Bunq-Server-Signature": signature,
            "Content-Type": "application/json",
        }
        return httpx.Response(status, headers=headers, content=body.encode("utf-8"))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self, **kw: Any) -> BunqApiClient:
        return BunqApiClient(base_url="https://bunq.test", transport=self.transport(), **kw)

    def paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


@pytest.fixture()
def fake_bunq(server_keys: KeyPair) -> FakeBunq:
    return FakeBunq(server_keys=server_keys)


@pytest.fixture()
def sign_response(server_keys: KeyPair) -> Callable[..., str]:
    def _sign(status: int, request_id: str, response_id: str, body: str) -> str:
        return sign_server_response(server_keys, status, request_id, response_id, body)

    return _sign
