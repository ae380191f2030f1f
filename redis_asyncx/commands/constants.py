"""
redis_asyncx.commands.constants
-------------------------------
Constants relating to redis command names
"""

from __future__ import annotations

from redis_asyncx._enum import CaseAndEncodingInsensitiveEnum


class CommandName(CaseAndEncodingInsensitiveEnum):
    """
    Enum for listing the redis commands supported by the client
    """

    #: Commands for connection
    HELLO = b"HELLO"  # Since redis: 6.0.0
    PING = b"PING"  # Since redis: 1.0.0

    #: Commands for string
    GET = b"GET"  # Since redis: 1.0.0
    SET = b"SET"  # Since redis: 1.0.0
    INCR = b"INCR"  # Since redis: 1.0.0
    DECR = b"DECR"  # Since redis: 1.0.0
    GETEX = b"GETEX"  # Since redis: 6.2.0

    #: Commands for generic
    DEL = b"DEL"  # Since redis: 1.0.0
    EXISTS = b"EXISTS"  # Since redis: 1.0.0
    EXPIRE = b"EXPIRE"  # Since redis: 1.0.0
    TTL = b"TTL"  # Since redis: 1.0.0

    #: Commands for list
    LPUSH = b"LPUSH"  # Since redis: 1.0.0
    RPUSH = b"RPUSH"  # Since redis: 1.0.0
    LPOP = b"LPOP"  # Since redis: 1.0.0
    RPOP = b"RPOP"  # Since redis: 1.0.0
    LRANGE = b"LRANGE"  # Since redis: 1.0.0


class PureToken(CaseAndEncodingInsensitiveEnum):
    """
    Literal tokens sent as command options
    """

    EX = b"EX"
    PX = b"PX"
    EXAT = b"EXAT"
    PXAT = b"PXAT"
    PERSIST = b"PERSIST"
    NX = b"NX"
    XX = b"XX"
