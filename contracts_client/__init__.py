"""Client for the Contracts Server backend token exchange."""
from contracts_client.client import TokenClient
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

__all__ = [
    "TokenClient",
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
