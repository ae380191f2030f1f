from __future__ import annotations

import logging

from redis_asyncx.typing import ValueT

logger = logging.getLogger("redis_asyncx")


def b(value: ValueT, encoding: str = "utf-8") -> bytes:
    """Encode a command argument to :class:`bytes`"""
    if isinstance(value, bytes):
        return value
    return str(value).encode(encoding)


def nativestr(value: ValueT, encoding: str = "utf-8") -> str:
    """Decode a command argument or textual reply to :class:`str`"""
    if isinstance(value, bytes):
        return value.decode(encoding, "replace")
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(f"Unable to cast {value!r} to string")
