from __future__ import annotations

import hashlib

_FLOAT_BITS = 53


def luck_seed(key: str) -> int:
    """Derive a deterministic 64-bit seed from an arbitrary string key."""
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


def luck(key: str) -> float:
    """Map ``key`` to a reproducible value in [0, 1)."""
    return (luck_seed(key) >> (64 - _FLOAT_BITS)) / float(1 << _FLOAT_BITS)


def presence_key(i: int, j: int) -> str:
    return f"{i},{j}"


def initial_value_key(i: int, j: int) -> str:
    return f"{i},{j},initialValue"
