from __future__ import annotations

from fastapi import APIRouter, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from contractsapi import apidef
from contractsapi.models import FLAT_OBJECT, SubscriptionResponse, TokenResponse
from ..logging_conf import get_logger
from ..settings import EndpointSettings, MockSettings

token_router = APIRouter()
subscription_router = APIRouter()
logger = get_logger("contracts_mock.api")

# Mismatched methods must reach the handler to get a 400 instead of a 405.
_ANY_METHOD = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _settings(request: Request) -> MockSettings:
    return request.app.state.settings


def _bad_request(message: str, request: Request) -> PlainTextResponse:
    logger.error(
        "mock.bad_request",
        extra={
            "event": "bad_request",
            "error": message,
            "endpoint": request.url.path,
            "method": request.method,
        },
    )
    return PlainTextResponse(message + "\n", status_code=status.HTTP_400_BAD_REQUEST)


async def _preflight(
    request: Request, want_method: str, endpoint: EndpointSettings
) -> Response | None:
    """Shared checks for both endpoints; a response here short-circuits the handler."""
    logger.info(
        "mock.request",
        extra={"event": "received_request", "endpoint": request.url.path, "method": request.method},
    )
    if request.method != want_method:
        return _bad_request(f"this endpoint only supports {want_method}", request)

    if endpoint.blocked:
        await run_in_threadpool(request.app.state.stopped.wait)
        logger.debug("mock.unblocked", extra={"event": "unblocked", "endpoint": request.url.path})
        return PlainTextResponse(
            "server stopped", status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    code = endpoint.on_success.status
    if code != status.HTTP_200_OK:
        logger.info(
            "mock.error",
            extra={"event": "mock_error", "endpoint": request.url.path, "status_code": code},
        )
        return PlainTextResponse(f"mock error: {code}", status_code=code)
    return None


@token_router.api_route(
    apidef.TOKEN.route, methods=_ANY_METHOD, summary="Issue a short-lived access token"
)
async def handle_token(request: Request) -> Response:
    endpoint = _settings(request).token
    early = await _preflight(request, apidef.TOKEN.method, endpoint)
    if early is not None:
        return early
    body = TokenResponse(token=endpoint.on_success.value)
    return JSONResponse(content=body.model_dump(by_alias=True))


@subscription_router.api_route(
    apidef.SUBSCRIPTION.route, methods=_ANY_METHOD, summary="Exchange a user JWT for a Pro token"
)
async def handle_subscription(request: Request) -> Response:
    endpoint = _settings(request).subscription
    early = await _preflight(request, apidef.SUBSCRIPTION.method, endpoint)
    if early is not None:
        return early

    try:
        data = FLAT_OBJECT.validate_json(await request.body())
    except ValidationError:
        return _bad_request("Bad Request", request)

    user_jwt = data.get(apidef.JWT_KEY)
    if user_jwt is None:
        return _bad_request("JSON payload does not contain the expected key", request)
    if not user_jwt:
        return _bad_request("JWT cannot be empty", request)

    body = SubscriptionResponse(token=endpoint.on_success.value)
    return JSONResponse(content=body.model_dump(by_alias=True))
