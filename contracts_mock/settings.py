"""Behaviour settings for the mocked Contracts Server backend.

Settings are plain pydantic models so they can be loaded from and dumped to
YAML. Defaults answer every request successfully with sentinel tokens.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

__all__ = [
    "DEFAULT_AD_TOKEN",
    "DEFAULT_PRO_TOKEN",
    "DEFAULT_ADDRESS",
    "ResponseSettings",
    "EndpointSettings",
    "MockSettings",
    "default_settings",
    "make_settings",
    "load_settings",
    "dump_settings",
    "get_settings_from_env",
    "split_address",
    "join_address",
]

DEFAULT_AD_TOKEN = "eHy_ADToken"
DEFAULT_PRO_TOKEN = "CHx_ProToken"
DEFAULT_ADDRESS = "127.0.0.1:0"


class ResponseSettings(BaseModel):
    """Happy-path response of an endpoint."""

    value: str = ""
    status: int = Field(200, ge=100, le=599)


class EndpointSettings(BaseModel):
    on_success: ResponseSettings = Field(default_factory=ResponseSettings)
    disabled: bool = False  # route not mounted, requests get 404
    blocked: bool = False  # no answer until the server stops


class MockSettings(BaseModel):
    token: EndpointSettings
    subscription: EndpointSettings
    address: str = DEFAULT_ADDRESS


def default_settings() -> MockSettings:
    return MockSettings(
        token=EndpointSettings(on_success=ResponseSettings(value=DEFAULT_AD_TOKEN)),
        subscription=EndpointSettings(on_success=ResponseSettings(value=DEFAULT_PRO_TOKEN)),
    )


def make_settings(
    *,
    token_value: str | None = None,
    token_status: int | None = None,
    subscription_value: str | None = None,
    subscription_status: int | None = None,
) -> MockSettings:
    """Default settings with any of the four response knobs overridden."""
    settings = default_settings()
    if token_value is not None:
        settings.token.on_success.value = token_value
    if token_status is not None:
        settings.token.on_success.status = token_status
    if subscription_value is not None:
        settings.subscription.on_success.value = subscription_value
    if subscription_status is not None:
        settings.subscription.on_success.status = subscription_status
    return MockSettings.model_validate(settings.model_dump())


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: str | Path | None = None) -> MockSettings:
    """Load settings from a YAML file, filling gaps with the defaults.

    Raises:
        ValueError: if the file does not hold a YAML mapping.
    """
    defaults = default_settings()
    if path is None:
        return defaults
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"settings file {path} must contain a mapping")
    return MockSettings.model_validate(_deep_merge(defaults.model_dump(), data))


def dump_settings(settings: MockSettings) -> str:
    return yaml.safe_dump(settings.model_dump(), sort_keys=False)


def get_settings_from_env() -> MockSettings:
    """Read MOCK_SETTINGS (a YAML path) from environment; defaults if unset."""
    return load_settings(os.getenv("MOCK_SETTINGS") or None)


def split_address(address: str) -> tuple[str, int]:
    """Split "host:port" into its parts. An empty host means localhost."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"address must be host:port, got {address!r}")
    try:
        port_num = int(port, 10)
    except ValueError as e:
        raise ValueError(f"address port must be an integer, got {port!r}") from e
    if not (0 <= port_num <= 65535):
        raise ValueError(f"address port out of range: {port_num}")
    return host.strip("[]") or "127.0.0.1", port_num


def join_address(host: str, port: int) -> str:
    """Inverse of `split_address`; IPv6 hosts are bracketed."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
