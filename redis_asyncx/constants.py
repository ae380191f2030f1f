"""
RESP protocol constants
"""

from __future__ import annotations

import enum
from typing import Final

from redis_asyncx._utils import b


class DataType(enum.IntEnum):
    """
    Markers used by redis server to signal
    the type of data being sent.

    See:

    - `RESP protocol spec <https://redis.io/docs/develop/reference/protocol-spec>`__
    - `RESP3 specification <https://github.com/antirez/RESP3/blob/master/spec.md>`__
    """

    NONE = ord(b"_")
    SIMPLE_STRING = ord(b"+")
    BULK_STRING = ord(b"$")
    VERBATIM = ord(b"=")
    BOOLEAN = ord(b"#")
    INT = ord(b":")
    DOUBLE = ord(b",")
    BIGNUMBER = ord(b"(")
    ARRAY = ord(b"*")
    PUSH = ord(b">")
    MAP = ord(b"%")
    SET = ord(b"~")
    ERROR = ord(b"-")
    BLOB_ERROR = ord(b"!")


#: Markers that only a RESP3 speaking server will send
RESP3_ONLY: Final[frozenset[int]] = frozenset(
    {
        DataType.NONE,
        DataType.VERBATIM,
        DataType.BOOLEAN,
        DataType.DOUBLE,
        DataType.BIGNUMBER,
        DataType.PUSH,
        DataType.MAP,
        DataType.SET,
        DataType.BLOB_ERROR,
    }
)

#: Markers of aggregate types
AGGREGATES: Final[frozenset[int]] = frozenset(
    {DataType.ARRAY, DataType.PUSH, DataType.MAP, DataType.SET}
)

#: Protocol versions that can be negotiated with ``HELLO``
PROTOCOL_VERSIONS: Final[frozenset[int]] = frozenset({2, 3})

SYM_STAR: Final[bytes] = b("*")
SYM_DOLLAR: Final[bytes] = b("$")
SYM_CRLF: Final[bytes] = b("\r\n")
SYM_LF: Final[bytes] = b("\n")
SYM_EMPTY: Final[bytes] = b("")
SYM_TRUE: Final[bytes] = b("t")
SYM_FALSE: Final[bytes] = b("f")
