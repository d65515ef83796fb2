"""Mocked Contracts Server backend for client contract testing.

DO NOT USE IN PRODUCTION.
"""
from importlib.metadata import PackageNotFoundError, version

from .main import create_app
from .server import MockServer
from .settings import DEFAULT_AD_TOKEN, DEFAULT_PRO_TOKEN, MockSettings, make_settings

try:
    __version__ = version("contracts-token-client")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "DEFAULT_AD_TOKEN",
    "DEFAULT_PRO_TOKEN",
    "MockServer",
    "MockSettings",
    "create_app",
    "make_settings",
]
