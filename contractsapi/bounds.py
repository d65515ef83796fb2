from __future__ import annotations

from .apidef import TOKEN_MAX_SIZE

__all__ = ["check_length", "is_valid_length"]


def check_length(length: int, limit: int = TOKEN_MAX_SIZE) -> None:
    """Sanity check that 0 < length <= limit.

    A negative length means the size is unknown, which is never accepted:
    callers must not buffer an unbounded payload.

    Raises:
        ValueError: naming the reason the length was rejected.
    """
    if length < 0:
        raise ValueError("negative length")
    if length == 0:
        raise ValueError("empty")
    if length > limit:
        raise ValueError(f"too big: {length} bytes, limit is {limit}")


def is_valid_length(length: int, limit: int = TOKEN_MAX_SIZE) -> bool:
    """Boolean form of `check_length`."""
    try:
        check_length(length, limit)
    except ValueError:
        return False
    return True
