"""Shared fixtures: a live mock backend on an ephemeral port."""
from collections.abc import Callable, Iterator

import pytest

from contracts_mock import MockServer, MockSettings


@pytest.fixture
def serve_mock() -> Iterator[Callable[[MockSettings | None], str]]:
    """Start mock servers on demand and stop them after the test.

    Returns the base URL of each started server.
    """
    started: list[MockServer] = []

    def _serve(settings: MockSettings | None = None) -> str:
        server = MockServer(settings)
        addr = server.serve()
        started.append(server)
        return f"http://{addr}"

    yield _serve

    for server in started:
        server.stop()
