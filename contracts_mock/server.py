from __future__ import annotations

import socket
import threading
import time

import uvicorn

from .logging_conf import get_logger
from .main import create_app
from .settings import MockSettings, default_settings, join_address, split_address

__all__ = ["MockServer"]

logger = get_logger("contracts_mock.server")


class MockServer:
    """Serves the mocked backend on a background thread.

    Do not change `settings` after calling `serve`.

    Usage:
        with MockServer(make_settings(token_value="X")) as server:
            client = TokenClient(f"http://{server.address}", http)
    """

    def __init__(self, settings: MockSettings | None = None) -> None:
        self.settings = settings or default_settings()
        self.address: str | None = None
        self._lock = threading.Lock()
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._stopped = threading.Event()

    def serve(self, *, startup_timeout_s: float = 10.0) -> str:
        """Start listening and return the bound "host:port" address.

        Raises:
            RuntimeError: if already serving or the server fails to start.
            OSError: if the address cannot be bound.
        """
        with self._lock:
            if self._server is not None:
                raise RuntimeError("already serving")

            host, port = split_address(self.settings.address)
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                host, port, type=socket.SOCK_STREAM
            )[0]
            sock = socket.socket(family, socktype, proto)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                sock.bind(sockaddr)
            except OSError:
                sock.close()
                raise
            bound_host, bound_port = sock.getsockname()[:2]

            self._stopped = threading.Event()
            app = create_app(self.settings, stopped=self._stopped)
            config = uvicorn.Config(
                app, host=bound_host, port=bound_port, log_config=None, access_log=False
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(
                target=server.run,
                kwargs={"sockets": [sock]},
                name="contracts-mock",
                daemon=True,
            )
            thread.start()

            deadline = time.monotonic() + startup_timeout_s
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    thread.join(timeout=1.0)
                    sock.close()
                    raise RuntimeError("mock server failed to start")
                time.sleep(0.01)

            self._server = server
            self._thread = thread
            self.address = join_address(bound_host, bound_port)
            logger.info("mock.serving", extra={"event": "serving", "address": self.address})
            return self.address

    def stop(self, *, timeout_s: float = 5.0) -> None:
        """Release blocked requests, shut the server down and wait for its thread.

        Raises:
            RuntimeError: if the server is not serving.
        """
        with self._lock:
            if self._server is None or self._thread is None:
                raise RuntimeError("already stopped")
            self._stopped.set()
            self._server.should_exit = True
            self._thread.join(timeout=timeout_s)
            self._server = None
            self._thread = None
            logger.info("mock.stopped", extra={"event": "stopped", "address": self.address})

    def __enter__(self) -> MockServer:
        self.serve()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
