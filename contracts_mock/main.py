"""FastAPI app factory for the mocked Contracts Server backend.

DO NOT USE IN PRODUCTION.
"""
from __future__ import annotations

import os
import threading
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, Response

from .api import subscription_router, token_router
from .logging_conf import get_logger, setup_logging
from .settings import MockSettings, get_settings_from_env

logger = get_logger("contracts_mock")


def create_app(
    settings: MockSettings | None = None, *, stopped: threading.Event | None = None
) -> FastAPI:
    """Build the mock app.

    `stopped` releases handlers of blocked endpoints once set; callers that
    never block endpoints can leave it out.
    """
    if settings is None:
        settings = get_settings_from_env()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("startup", extra={"event": "startup"})
        yield
        logger.info("shutdown", extra={"event": "shutdown"})

    app = FastAPI(
        title="Contracts Server mock",
        version=os.getenv("APP_VERSION", "0.1.0"),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.stopped = stopped or threading.Event()

    @app.middleware("http")
    async def request_logger(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """JSON request logging with correlation id.

        - If the client sends X-Request-ID we propagate it; otherwise we mint one
        - Logs a start and end event with method/path/status/elapsed_ms
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.debug(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": request_id,
                },
            )
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    if not settings.token.disabled:
        app.include_router(token_router)
    if not settings.subscription.disabled:
        app.include_router(subscription_router)

    return app


def build_app() -> FastAPI:
    """ASGI factory: `uvicorn --factory contracts_mock.main:build_app`."""
    setup_logging()
    return create_app()
