from __future__ import annotations

import base64
import dataclasses
import json

import httpx
import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from bunq_sdk.services.api import (
    ApiContext,
    BunqApiClient,
    HttpMethod,
    MissingParameterError,
    ResponseVerificationError,
    UnsupportedMethodError,
    ensure_verified,
)
from bunq_sdk.services.signing.canonical import request_string


def _fixed_id() -> str:
    return "Req0001"


def _unsigned(headers):
    return {name: value for name, value in headers.items() if name.lower() != "x-bunq-client-signature"}


def _verify_client_signature(keys, method, uri, headers, body):
    signature = base64.b64decode(headers["X-Bunq-Client-Signature"])
    data = request_string(method, uri, _unsigned(headers), body).encode("utf-8")
    keys.private_key.public_key().verify(signature, data, padding.PKCS1v15(), hashes.SHA256())


def test_default_headers_without_token(api_context):
    headers = BunqApiClient(request_id_factory=_fixed_id).default_headers(api_context)
    assert headers == {
        "Cache-Control": "no-cache",
        "User-Agent": "bunq-TestSerdver/1.00 sandbox/0.17b",
        "X-Bunq-Language": "en_US",
        "X-Bunq-Region": "en_US",
        "X-Bunq-Geolocation": "0 0 0 00 NL",
        "X-Bunq-Client-Request-Id": "Req0001",
    }


def test_default_headers_carry_token_and_random_request_id(api_context):
    headers = BunqApiClient().default_headers(api_context.with_token("session-xyz"))
    assert headers["X-Bunq-Client-Authentication"] == "session-xyz"
    request_id = headers["X-Bunq-Client-Request-Id"]
    assert len(request_id) == 7 and request_id.isalnum()


def test_installation_request_canonical_string(api_context, client_keys):
    ctx = dataclasses.replace(api_context, public_key_pem="PUB")
    request = BunqApiClient(request_id_factory=_fixed_id).build_request(
        ctx, "POST", "/installation", {"client_public_key": ctx.public_key_pem}
    )
    assert request.uri == "/v1/installation"
    assert request.url == "https://sandbox.public.api.bunq.com/v1/installation"
    assert request.body == '{"client_public_key":"PUB"}'
    assert request_string(request.method, request.uri, _unsigned(request.headers), request.body) == (
        "POST /v1/installation\n"
        "Cache-Control: no-cache\n"
        "User-Agent: bunq-TestSerdver/1.00 sandbox/0.17b\n"
        "X-Bunq-Client-Request-Id: Req0001\n"
        "X-Bunq-Geolocation: 0 0 0 00 NL\n"
        "X-Bunq-Language: en_US\n"
        "X-Bunq-Region: en_US\n"
        "\n"
        '{"client_public_key":"PUB"}'
    )
    _verify_client_signature(client_keys, request.method, request.uri, request.headers, request.body)


def test_get_requests_never_carry_a_body(api_context):
    request = BunqApiClient().build_request(api_context, HttpMethod.GET, "/user", {"ignored": True})
    assert request.body is None
    assert request.content is None


def test_body_is_compact_json_in_insertion_order(api_context):
    request = BunqApiClient().build_request(api_context, "POST", "device-server", {"secret": "s", "description": "d é"})
    assert request.uri == "/v1/device-server"
    assert request.body == '{"secret":"s","description":"d é"}'


@pytest.mark.anyio
async def test_call_sends_exactly_what_was_signed(fake_bunq, api_context, client_keys):
    fake_bunq.reply("POST", "/v1/session-server", 200, {"Response": [{"Id": {"id": 5}}]})
    client = fake_bunq.client()
    ctx = api_context.with_token("installation-token")

    response = await client.post_session_server(ctx)

    assert response.status_code == 200
    (sent,) = fake_bunq.requests
    assert sent.content == b'{"secret":"sandbox-api-key"}'
    assert sent.headers["X-Bunq-Client-Authentication"] == "installation-token"
    headers = {k: v for k, v in sent.headers.items()}
    # httpx normalises header names on the wire; re-key to the canonical names before checking the signature
    canonical = {
        name: headers[name.lower()]
        for name in (
            "Cache-Control",
            "User-Agent",
            "X-Bunq-Language",
            "X-Bunq-Region",
            "X-Bunq-Geolocation",
            "X-Bunq-Client-Request-Id",
            "X-Bunq-Client-Authentication",
            "X-Bunq-Client-Signature",
        )
    }
    _verify_client_signature(client_keys, "POST", "/v1/session-server", canonical, sent.content.decode())


@pytest.mark.anyio
async def test_error_status_is_returned_not_raised(fake_bunq, api_context):
    fake_bunq.reply("GET", "/v1/user", 500, {"Error": [{"error_description": "boom"}]})
    response = await fake_bunq.client().user(api_context)
    assert response.status_code == 500
    assert response.verify(api_context.server_public_key)


@pytest.mark.anyio
async def test_transport_errors_propagate_unwrapped(api_context):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = BunqApiClient(transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.ConnectError):
        await client.user(api_context)


@pytest.mark.anyio
async def test_post_installation_decodes_token_and_server_key(fake_bunq, api_context):
    fake_bunq.reply(
        "POST",
        "/v1/installation",
        200,
        {
            "Response": [
                {"Id": {"id": 42}},
                {"Token": {"id": 7, "created": "2017-01-01", "updated": "2017-01-01", "token": "inst-token"}},
                {"ServerPublicKey": {"server_public_key": "SERVER-PEM"}},
            ]
        },
    )
    result = await fake_bunq.client().post_installation(api_context)
    assert (result.token, result.server_public_key, result.installation_id) == ("inst-token", "SERVER-PEM", 42)
    sent = json.loads(fake_bunq.requests[0].content)
    assert sent == {"client_public_key": api_context.public_key_pem}
    assert "X-Bunq-Client-Authentication" not in fake_bunq.requests[0].headers


@pytest.mark.anyio
@pytest.mark.parametrize(
    "operation, kwargs, expected",
    [
        ("installation", {"method": "GET"}, ("GET", "/v1/installation")),
        ("installation", {"method": "GET", "id": 3}, ("GET", "/v1/installation/3")),
        ("installation_server_public_key", {"id": 3}, ("GET", "/v1/installation/3/server-public-key")),
        ("device", {}, ("GET", "/v1/device")),
        ("device", {"id": 9}, ("GET", "/v1/device/9")),
        ("device_server", {"method": "GET"}, ("GET", "/v1/device-server")),
        ("device_server", {"method": "GET", "id": 9}, ("GET", "/v1/device-server/9")),
        ("device_server", {"method": "POST"}, ("POST", "/v1/device-server")),
        ("session_server", {}, ("POST", "/v1/session-server")),
        ("user", {}, ("GET", "/v1/user")),
        ("user", {"id": 11}, ("GET", "/v1/user/11")),
        ("monetary_account", {"user_id": 11}, ("GET", "/v1/user/11/monetary-account")),
        ("monetary_account", {"user_id": 11, "id": 2}, ("GET", "/v1/user/11/monetary-account/2")),
        ("credential_password_ip", {"user_id": 11}, ("GET", "/v1/user/11/credential-password-ip")),
        ("credential_password_ip", {"user_id": 11, "ip_id": 4}, ("GET", "/v1/user/11/credential-password-ip/4/ip")),
        (
            "credential_password_ip",
            {"method": "POST", "user_id": 11, "ip_id": 4, "body": {"ip": "62.41.23.0", "status": "ACTIVE"}},
            ("POST", "/v1/user/11/credential-password-ip/4/ip"),
        ),
    ],
)
async def test_resource_paths(fake_bunq, api_context, operation, kwargs, expected):
    fake_bunq.routes[expected] = (200, {"Response": []})
    kwargs = dict(kwargs)
    method = kwargs.pop("method", None)
    call = getattr(fake_bunq.client(), operation)
    if method is None:
        await call(api_context, **kwargs)
    else:
        await call(api_context, method, **kwargs)
    assert fake_bunq.paths() == [expected]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "operation, method",
    [
        ("installation", "DELETE"),
        ("installation_server_public_key", "POST"),
        ("device", "POST"),
        ("device_server", "DELETE"),
        ("session_server", "GET"),
        ("user", "POST"),
        ("monetary_account", "POST"),
        ("credential_password_ip", "DELETE"),
        ("user", "PATCH"),
    ],
)
async def test_methods_outside_allow_list_fail_before_sending(fake_bunq, api_context, operation, method):
    call = getattr(fake_bunq.client(), operation)
    with pytest.raises(UnsupportedMethodError) as excinfo:
        await call(api_context, method)
    assert excinfo.value.method == method
    assert fake_bunq.requests == []


@pytest.mark.anyio
async def test_monetary_account_requires_user_id(fake_bunq, api_context):
    with pytest.raises(MissingParameterError) as excinfo:
        await fake_bunq.client().monetary_account(api_context, "GET")
    assert excinfo.value.parameter == "user id"
    assert fake_bunq.requests == []


@pytest.mark.anyio
async def test_monetary_account_post_is_unsupported_even_without_user_id(fake_bunq, api_context):
    with pytest.raises(UnsupportedMethodError):
        await fake_bunq.client().monetary_account(api_context, "POST")


@pytest.mark.anyio
@pytest.mark.parametrize(
    "kwargs, parameter",
    [
        ({"user_id": 1, "body": {"ip": "1.2.3.4"}}, "ip id"),
        ({"user_id": 1, "ip_id": 2, "body": {"status": "ACTIVE"}}, "ip"),
        ({"ip_id": 2, "body": {"ip": "1.2.3.4"}}, "user id"),
    ],
)
async def test_permitted_ip_post_requires_parameters(fake_bunq, api_context, kwargs, parameter):
    with pytest.raises(MissingParameterError) as excinfo:
        await fake_bunq.client().credential_password_ip(api_context, "POST", **kwargs)
    assert excinfo.value.parameter == parameter


@pytest.mark.anyio
async def test_installation_server_public_key_requires_id(fake_bunq, api_context):
    with pytest.raises(MissingParameterError):
        await fake_bunq.client().installation_server_public_key(api_context)


@pytest.mark.anyio
async def test_post_permitted_ip_body(fake_bunq, api_context):
    fake_bunq.reply("POST", "/v1/user/11/credential-password-ip/4/ip", 200, {"Response": [{"Id": {"id": 99}}]})
    await fake_bunq.client().post_permitted_ip(api_context, 11, 4, "62.41.23.0")
    assert fake_bunq.requests[0].content == b'{"ip":"62.41.23.0","status":"ACTIVE"}'


@pytest.mark.anyio
async def test_ensure_verified(fake_bunq, api_context):
    fake_bunq.reply("GET", "/v1/user", 200, {"Response": [{"UserCompany": {"id": 1}}]})
    client = fake_bunq.client()
    response = await client.user(api_context)
    assert ensure_verified(response, api_context.server_public_key) is response

    fake_bunq.tamper = True
    tampered = await client.user(api_context)
    assert tampered.verify(api_context.server_public_key) is False
    with pytest.raises(ResponseVerificationError) as excinfo:
        ensure_verified(tampered, api_context.server_public_key)
    assert excinfo.value.request_id == tampered.request_id


def test_ensure_verified_without_server_key(api_context):
    from bunq_sdk.services.api.client import ApiResponse

    response = ApiResponse(status_code=200, headers=httpx.Headers({}), body="{}")
    with pytest.raises(ResponseVerificationError):
        ensure_verified(response, None)


def test_context_updates_return_new_values(api_context):
    updated = api_context.with_token("t1")
    assert api_context.auth_token is None
    assert updated.auth_token == "t1"
    assert updated.authenticated and not api_context.authenticated
    with pytest.raises(dataclasses.FrozenInstanceError):
        updated.auth_token = "t2"  # type: ignore[misc]
    assert "sandbox-api-key" not in repr(updated)
