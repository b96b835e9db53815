from __future__ import annotations

import json

import httpx
import pytest
from gitx.errors import RemoteError
from gitx.forge import ForgeClient


def test_requests_carry_bearer_token_and_json_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201)

    with ForgeClient(
        "tok", "https://api.example.test/", transport=httpx.MockTransport(handler)
    ) as client:
        response = client.create_repository("demo", private=True)

    assert response.status_code == 201
    request = seen[0]
    assert str(request.url) == "https://api.example.test/user/repos"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["Accept"] == "application/vnd.github+json"
    assert request.headers["User-Agent"].startswith("gitx/")
    assert json.loads(request.content) == {"name": "demo", "private": True}


def test_status_codes_are_returned_not_raised() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    with ForgeClient("tok", transport=transport) as client:
        assert client.get_repository("alice", "demo").status_code == 404


def test_transport_failure_becomes_remote_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with ForgeClient("tok", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RemoteError) as excinfo:
            client.get_repository("alice", "demo")
    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_identity_without_login_is_rejected() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    with ForgeClient("tok", transport=transport) as client:
        with pytest.raises(RemoteError):
            client.get_authenticated_login()
