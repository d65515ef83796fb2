"""Mock backend routes, exercised in-process through the ASGI transport."""

import asyncio
import threading

import httpx
import pytest

from contracts_client import (
    BackendValidationError,
    MissingFieldError,
    RejectedIdentityError,
    TokenClient,
    UnexpectedStatusError,
)
from contracts_mock import create_app, make_settings
from contracts_mock.settings import default_settings


def _http(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.asyncio
async def test_token_default_response():
    async with _http(create_app(default_settings())) as http:
        r = await http.get("/v1/token")
    assert r.status_code == 200
    assert r.json() == {"azure_ad_token": "eHy_ADToken"}
    assert int(r.headers["Content-Length"]) == len(r.content)


@pytest.mark.asyncio
async def test_subscription_default_response():
    async with _http(create_app(default_settings())) as http:
        r = await http.post("/v1/subscription", json={"ms_store_id_key": "validjwt"})
    assert r.status_code == 200
    assert r.json() == {"contract_token": "CHx_ProToken"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method, path, want",
    [
        ("POST", "/v1/token", "GET"),
        ("PUT", "/v1/token", "GET"),
        ("GET", "/v1/subscription", "POST"),
        ("DELETE", "/v1/subscription", "POST"),
        ("OPTIONS", "/v1/token", "GET"),
        ("OPTIONS", "/v1/subscription", "POST"),
    ],
)
async def test_method_mismatch_is_bad_request(method, path, want):
    async with _http(create_app(default_settings())) as http:
        r = await http.request(method, path)
    assert r.status_code == 400
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text.strip() == f"this endpoint only supports {want}"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/v1/token", "/v1/subscription"])
async def test_head_is_bad_request(path):
    async with _http(create_app(default_settings())) as http:
        r = await http.head(path)
    assert r.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [401, 404, 500])
async def test_configured_status_short_circuits(status):
    settings = make_settings(token_status=status, subscription_status=status)
    async with _http(create_app(settings)) as http:
        token = await http.get("/v1/token")
        sub = await http.post("/v1/subscription", content=b"not even json")
    for r in (token, sub):
        assert r.status_code == status
        assert r.text == f"mock error: {status}"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content, message",
    [
        (b"invalid JSON", "Bad Request"),
        (b'{"ms_store_id_key": 42}', "Bad Request"),
        (b'{"other_key": "validjwt"}', "JSON payload does not contain the expected key"),
        (b'{"ms_store_id_key": ""}', "JWT cannot be empty"),
    ],
)
async def test_subscription_validates_request(content, message):
    async with _http(create_app(default_settings())) as http:
        r = await http.post("/v1/subscription", content=content)
    assert r.status_code == 400
    assert r.text.strip() == message


@pytest.mark.asyncio
async def test_disabled_endpoints_are_not_mounted():
    settings = default_settings()
    settings.token.disabled = True
    async with _http(create_app(settings)) as http:
        token = await http.get("/v1/token")
        sub = await http.post("/v1/subscription", json={"ms_store_id_key": "validjwt"})
    assert token.status_code == 404
    assert sub.status_code == 200


@pytest.mark.asyncio
async def test_request_id_is_propagated():
    async with _http(create_app(default_settings())) as http:
        minted = await http.get("/v1/token")
        echoed = await http.get("/v1/token", headers={"X-Request-ID": "req-123"})
    assert minted.headers["X-Request-ID"]
    assert echoed.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_blocked_endpoint_waits_for_stop():
    settings = default_settings()
    settings.token.blocked = True
    stopped = threading.Event()
    async with _http(create_app(settings, stopped=stopped)) as http:
        pending = asyncio.create_task(http.get("/v1/token"))
        await asyncio.sleep(0.1)
        assert not pending.done()
        stopped.set()
        r = await asyncio.wait_for(pending, timeout=5)
    assert r.status_code == 503


# ------------------------
# TokenClient against the mock app
# ------------------------


@pytest.mark.asyncio
async def test_client_against_mock_app():
    settings = make_settings(token_value="AD", subscription_value="PRO")
    async with _http(create_app(settings)) as http:
        client = TokenClient("http://testserver", http)
        assert await client.get_access_token() == "AD"
        assert await client.exchange_user_token("validjwt") == "PRO"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [(401, RejectedIdentityError), (500, BackendValidationError), (422, UnexpectedStatusError)],
)
async def test_client_maps_mock_statuses(status, error):
    async with _http(create_app(make_settings(subscription_status=status))) as http:
        client = TokenClient("http://testserver", http)
        with pytest.raises(error):
            await client.exchange_user_token("validjwt")


@pytest.mark.asyncio
async def test_client_reports_disabled_endpoint():
    settings = default_settings()
    settings.subscription.disabled = True
    async with _http(create_app(settings)) as http:
        client = TokenClient("http://testserver", http)
        with pytest.raises(UnexpectedStatusError) as exc:
            await client.exchange_user_token("validjwt")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_client_rejects_body_without_key():
    """A 200 without the expected key from a misbehaving backend."""
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse

    app = FastAPI()

    @app.get("/v1/token")
    async def token() -> JSONResponse:
        return JSONResponse({"unexpected_key": "value"})

    async with _http(app) as http:
        client = TokenClient("http://testserver", http)
        with pytest.raises(MissingFieldError):
            await client.get_access_token()
