from __future__ import annotations

import os

import httpx

from contractsapi.apidef import DEFAULT_BASE_URL

__all__ = ["get_base_url_from_env", "get_timeout_from_env", "get_user_jwt_from_env"]


def get_base_url_from_env() -> str:
    """Read CONTRACTS_BASE_URL from environment.

    Falls back to the production backend. The value must be an absolute
    http(s) URL.
    """
    raw = os.getenv("CONTRACTS_BASE_URL", DEFAULT_BASE_URL).strip()
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise ValueError(f"CONTRACTS_BASE_URL is not a valid URL: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError("CONTRACTS_BASE_URL must be an absolute http(s) URL")
    return raw


def get_user_jwt_from_env() -> str | None:
    """Read USER_JWT from environment, None if unset or blank."""
    val = os.getenv("USER_JWT", "").strip()
    return val or None


def get_timeout_from_env() -> float:
    """Read HTTP_TIMEOUT (seconds) from environment, defaulting to 10."""
    raw = os.getenv("HTTP_TIMEOUT", "10")
    try:
        val = float(raw)
    except ValueError as e:
        raise ValueError(f"HTTP_TIMEOUT must be a number, got {raw!r}") from e
    if not val > 0:
        raise ValueError("HTTP_TIMEOUT must be positive")
    return val
