"""Constants defining the Contracts Server backend REST API."""
from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "VERSION",
    "TOKEN_PATH",
    "SUBSCRIPTION_PATH",
    "TOKEN_MAX_SIZE",
    "AD_TOKEN_KEY",
    "JWT_KEY",
    "PRO_TOKEN_KEY",
    "DEFAULT_BASE_URL",
    "Endpoint",
    "TOKEN",
    "SUBSCRIPTION",
]

VERSION = "/v1"

TOKEN_PATH = "/token"
SUBSCRIPTION_PATH = "/subscription"

# Real AD tokens stay between 1.2kB and 1.7kB; Pro tokens are much smaller.
TOKEN_MAX_SIZE = 4096

AD_TOKEN_KEY = "azure_ad_token"
JWT_KEY = "ms_store_id_key"
PRO_TOKEN_KEY = "contract_token"

DEFAULT_BASE_URL = "https://contracts.canonical.com"


@dataclass(frozen=True)
class Endpoint:
    """Method, path and JSON keys of one backend operation."""

    method: str
    path: str
    response_key: str
    request_key: str | None = None

    @property
    def route(self) -> str:
        """Path relative to the server root, API version included."""
        return VERSION + self.path


TOKEN = Endpoint(method="GET", path=TOKEN_PATH, response_key=AD_TOKEN_KEY)
SUBSCRIPTION = Endpoint(
    method="POST",
    path=SUBSCRIPTION_PATH,
    response_key=PRO_TOKEN_KEY,
    request_key=JWT_KEY,
)
