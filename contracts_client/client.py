"""Client for the Contracts Server backend token exchange.

Two operations, one request each:
- get_access_token: GET /v1/token for a short-lived access token
- exchange_user_token: POST the user JWT to /v1/subscription for a Pro token

The client never retries, caches or refreshes tokens; callers own that policy.
"""
from __future__ import annotations

from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from contractsapi import apidef
from contractsapi.bounds import check_length
from contractsapi.models import (
    FLAT_OBJECT,
    SubscriptionRequest,
    SubscriptionResponse,
    TokenResponse,
)
from contracts_client.logging_conf import get_logger
from contracts_client.types import (
    BackendValidationError,
    ContractsError,
    InvalidLengthError,
    MalformedBodyError,
    MissingFieldError,
    RejectedIdentityError,
    Transport,
    TransportError,
    UnexpectedStatusError,
)
from contracts_client.utils import obfuscate, summarize_token

__all__ = ["TokenClient"]

logger = get_logger("contracts_client")

M = TypeVar("M", bound=BaseModel)


class TokenClient:
    """Talks to the Contracts Server backend through an injected transport.

    The transport is typically an `httpx.AsyncClient`; it owns TLS, pooling
    and timeouts. The client holds no mutable state and is safe to share
    between tasks when the transport is.
    """

    def __init__(self, base_url: str | httpx.URL, transport: Transport) -> None:
        self._base_url = httpx.URL(str(base_url))
        self._transport = transport

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    def _url(self, endpoint: apidef.Endpoint) -> httpx.URL:
        return self._base_url.copy_with(path=self._base_url.path.rstrip("/") + endpoint.route)

    async def get_access_token(self) -> str:
        """Return a short-lived auth token identifying the caller to the backend."""
        endpoint = apidef.TOKEN
        request = httpx.Request(
            endpoint.method, self._url(endpoint), headers={"Accept": "application/json"}
        )
        try:
            status, body = await self._roundtrip(request)
            if status != 200:
                raise UnexpectedStatusError(status, body)
            token = _decode(body, TokenResponse, endpoint.response_key).token
        except ContractsError as e:
            logger.warning(
                "token.access_failed",
                extra={"event": "access_token_failed", "code": e.code, "error": str(e)},
            )
            raise
        logger.info(
            "token.access",
            extra={"event": "access_token_fetched", **summarize_token(token)},
        )
        return token

    async def exchange_user_token(self, user_jwt: str) -> str:
        """Exchange the user JWT for a Pro token.

        The JWT is checked against the size bound before any request is sent,
        and it is never included in errors or logs.
        """
        endpoint = apidef.SUBSCRIPTION
        try:
            check_length(len(user_jwt.encode("utf-8")))
        except ValueError as e:
            raise InvalidLengthError(f"invalid user JWT: {e}") from e

        request = httpx.Request(
            endpoint.method,
            self._url(endpoint),
            content=SubscriptionRequest(user_jwt=user_jwt).to_json().encode("utf-8"),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
        )
        try:
            status, body = await self._roundtrip(request)
            # Add other codes as the backend documents them.
            if status == 401:
                raise RejectedIdentityError("the backend rejected the user ID key")
            if status == 500:
                raise BackendValidationError(
                    "the backend couldn't validate the user entitlement against the store"
                )
            if status != 200:
                raise UnexpectedStatusError(status, body)
            token = _decode(body, SubscriptionResponse, endpoint.response_key).token
        except ContractsError as e:
            logger.warning(
                "token.exchange_failed",
                extra={
                    "event": "pro_token_failed",
                    "code": e.code,
                    "error": str(e),
                    "jwt_hint": obfuscate(user_jwt),
                },
            )
            raise
        logger.info(
            "token.exchange",
            extra={"event": "pro_token_fetched", **summarize_token(token)},
        )
        return token

    async def _roundtrip(self, request: httpx.Request) -> tuple[int, bytes]:
        """Send the request and return its status and bounded body."""
        try:
            response = await self._transport.send(request, stream=True)
        except (httpx.HTTPError, OSError) as e:
            raise TransportError(f"failed to execute the {request.method} request: {e}") from e

        try:
            try:
                check_length(_content_length(response))
            except ValueError as e:
                raise InvalidLengthError(f"invalid response content length: {e}") from e
            body = await _read_bounded(response)
        finally:
            await response.aclose()
        return response.status_code, body


def _content_length(response: httpx.Response) -> int:
    """Declared body length, -1 when unknown."""
    raw = response.headers.get("Content-Length")
    if raw is None:
        return -1
    try:
        return int(raw)
    except ValueError:
        return -1


async def _read_bounded(response: httpx.Response) -> bytes:
    """Buffer the body, refusing to hold more than the size bound."""
    chunks: list[bytes] = []
    size = 0
    try:
        async for chunk in response.aiter_bytes():
            size += len(chunk)
            if size > apidef.TOKEN_MAX_SIZE:
                raise InvalidLengthError(
                    f"response body exceeds the declared limit of {apidef.TOKEN_MAX_SIZE} bytes"
                )
            chunks.append(chunk)
    except httpx.HTTPError as e:
        raise TransportError(f"failed to read the response body: {e}") from e
    return b"".join(chunks)


def _decode(body: bytes, model: type[M], key: str) -> M:
    try:
        data = FLAT_OBJECT.validate_json(body)
    except ValidationError as e:
        raise MalformedBodyError(f"failed to decode response body: {e.errors()[0]['msg']}") from e
    if key not in data:
        raise MissingFieldError(key)
    return model.model_validate(data)
