"""TokenClient against a live MockServer on an ephemeral port."""

import asyncio
import socket

import httpx
import pytest

from contracts_client import (
    BackendValidationError,
    RejectedIdentityError,
    TokenClient,
    TransportError,
    UnexpectedStatusError,
)
from contracts_mock import MockServer, make_settings
from contracts_mock.settings import default_settings


def _http() -> httpx.AsyncClient:
    return httpx.AsyncClient(trust_env=False, timeout=5.0)


@pytest.mark.asyncio
async def test_access_token_roundtrip(serve_mock):
    base_url = serve_mock(make_settings(token_value="eHy_ADToken"))
    async with _http() as http:
        assert await TokenClient(base_url, http).get_access_token() == "eHy_ADToken"


@pytest.mark.asyncio
async def test_pro_token_roundtrip(serve_mock):
    base_url = serve_mock(make_settings(subscription_value="CHx_ProToken"))
    async with _http() as http:
        assert await TokenClient(base_url, http).exchange_user_token("validjwt") == "CHx_ProToken"


@pytest.mark.asyncio
async def test_defaults_roundtrip(serve_mock):
    base_url = serve_mock()
    async with _http() as http:
        client = TokenClient(base_url, http)
        assert await client.get_access_token() == "eHy_ADToken"
        assert await client.exchange_user_token("validjwt") == "CHx_ProToken"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, error",
    [(401, RejectedIdentityError), (500, BackendValidationError), (503, UnexpectedStatusError)],
)
async def test_exchange_status_roundtrip(serve_mock, status, error):
    base_url = serve_mock(make_settings(subscription_status=status))
    async with _http() as http:
        with pytest.raises(error):
            await TokenClient(base_url, http).exchange_user_token("validjwt")


@pytest.mark.asyncio
async def test_access_token_error_roundtrip(serve_mock):
    base_url = serve_mock(make_settings(token_status=500))
    async with _http() as http:
        with pytest.raises(UnexpectedStatusError) as exc:
            await TokenClient(base_url, http).get_access_token()
    assert exc.value.status_code == 500
    assert exc.value.body == b"mock error: 500"


@pytest.mark.asyncio
async def test_cancel_while_backend_blocks(serve_mock):
    settings = default_settings()
    settings.subscription.blocked = True
    base_url = serve_mock(settings)
    async with _http() as http:
        task = asyncio.create_task(TokenClient(base_url, http).exchange_user_token("validjwt"))
        await asyncio.sleep(0.2)
        assert not task.done()
        task.cancel()
        done, _ = await asyncio.wait({task}, timeout=2)
    assert task in done
    assert task.cancelled()


@pytest.mark.asyncio
async def test_stopped_server_is_a_transport_error():
    server = MockServer()
    addr = server.serve()
    server.stop()
    async with _http() as http:
        with pytest.raises(TransportError):
            await TokenClient(f"http://{addr}", http).get_access_token()


def test_serve_returns_bound_address():
    with MockServer() as server:
        host, _, port = server.address.rpartition(":")
        assert host == "127.0.0.1"
        assert int(port) > 0


def test_serve_and_stop_twice_fail():
    server = MockServer()
    server.serve()
    with pytest.raises(RuntimeError, match="already serving"):
        server.serve()
    server.stop()
    with pytest.raises(RuntimeError, match="already stopped"):
        server.stop()


def test_server_can_be_restarted():
    server = MockServer()
    server.serve()
    server.stop()
    server.serve()
    server.stop()


def _has_ipv6_loopback() -> bool:
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
            sock.bind(("::1", 0))
    except OSError:
        return False
    return True


@pytest.mark.asyncio
@pytest.mark.skipif(not _has_ipv6_loopback(), reason="no IPv6 loopback on this host")
async def test_ipv6_roundtrip(serve_mock):
    settings = default_settings()
    settings.address = "[::1]:0"
    base_url = serve_mock(settings)
    assert base_url.startswith("http://[::1]:")
    async with _http() as http:
        client = TokenClient(base_url, http)
        assert await client.get_access_token() == "eHy_ADToken"
        assert await client.exchange_user_token("validjwt") == "CHx_ProToken"
