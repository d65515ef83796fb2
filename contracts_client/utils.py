from __future__ import annotations

__all__ = ["obfuscate", "summarize_token"]

_ENDS_TO_REVEAL = 2


def obfuscate(contents: str) -> str:
    """Mask all but the first and last two characters of a secret.

    Strings too short to keep any character hidden are masked entirely.
    """
    hidden = len(contents) - 2 * _ENDS_TO_REVEAL
    if hidden < 1:
        return "*" * len(contents)
    return contents[:_ENDS_TO_REVEAL] + "*" * hidden + contents[-_ENDS_TO_REVEAL:]


def summarize_token(token: str) -> dict:
    """Loggable description of a token that does not reveal it."""
    return {"length": len(token), "preview": obfuscate(token)}
