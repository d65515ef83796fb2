from __future__ import annotations

from typing import Protocol

import httpx

__all__ = [
    "Transport",
    "ContractsError",
    "TransportError",
    "InvalidLengthError",
    "MalformedBodyError",
    "MissingFieldError",
    "RejectedIdentityError",
    "BackendValidationError",
    "UnexpectedStatusError",
]


class Transport(Protocol):
    """Anything able to send one HTTP request, e.g. `httpx.AsyncClient`."""

    async def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response: ...


class ContractsError(RuntimeError):
    """Base class for failures talking to the Contracts Server backend.

    The `code` attribute is a stable machine code suitable for logs and metrics.
    """

    code: str = "contracts_error"


class TransportError(ContractsError):
    """Raised when the request never produced an HTTP response."""

    code = "transport_error"


class InvalidLengthError(ContractsError):
    """Raised when a response body or a user JWT is empty, unbounded or too big."""

    code = "invalid_length"


class MalformedBodyError(ContractsError):
    """Raised when a 200 response is not a flat JSON object of strings."""

    code = "malformed_body"


class MissingFieldError(ContractsError):
    """Raised when a well-formed response lacks the expected key."""

    code = "missing_field"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"expected key {key!r} not found in the response")


class RejectedIdentityError(ContractsError):
    """Raised on 401: the backend judged the user JWT invalid."""

    code = "rejected_identity"


class BackendValidationError(ContractsError):
    """Raised on 500: the backend could not validate the entitlement upstream."""

    code = "backend_validation_failure"


class UnexpectedStatusError(ContractsError):
    code = "unexpected_status"

    def __init__(self, status_code: int, body: bytes) -> None:
        self.status_code = status_code
        self.body = body
        text = body.decode("utf-8", errors="replace")
        super().__init__(f"unexpected reply from the contracts server: code {status_code}, {text}")
