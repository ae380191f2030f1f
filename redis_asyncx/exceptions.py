from __future__ import annotations

from redis_asyncx.typing import TYPE_CHECKING, Set

if TYPE_CHECKING:
    from redis_asyncx.response.types import Value


class RedisError(Exception):
    """
    Base exception from which all other exceptions in redis_asyncx
    derive from.
    """


class CommandSyntaxError(RedisError):
    """
    Raised when a redis command is called with an invalid syntax
    """

    def __init__(self, arguments: Set[str], message: str) -> None:
        self.arguments: Set[str] = arguments
        super().__init__(message)


class ConnectionError(RedisError):
    """
    Raised when the transport to the server could not be established
    or failed while sending or receiving. The connection is closed
    and can not be used anymore.
    """


class ConnectionClosedError(ConnectionError):
    """
    Raised when a command is attempted on a connection that has
    already been closed
    """


class ProtocolError(ConnectionError):
    """
    Raised on errors related to deserializing the wire protocol
    (malformed or truncated frames). Since the read buffer can no longer
    be trusted to be aligned with frame boundaries the connection is closed.
    """


class TimeoutError(RedisError):
    """
    Raised when a response was not received within the stream timeout.
    The connection is closed as the late reply can not be matched anymore.
    """


class InvalidResponse(RedisError):
    """
    Raised when a well formed reply was received that does not match
    what was expected. The connection remains usable.
    """


class UnexpectedResponseError(InvalidResponse):
    """
    Raised when the type of a reply does not match the shape expected
    by the command that was issued (for example ``INCR`` not replying
    with an integer)
    """

    def __init__(self, command: str, response: Value, expected: str) -> None:
        self.command = command
        self.response = response
        super().__init__(f"Unexpected response to {command}: expected {expected}, got {response!r}")


class NegotiationError(RedisError):
    """
    Raised when the server rejected a ``HELLO`` protocol switch or
    replied with a malformed confirmation. The previously negotiated
    protocol version remains in effect.
    """


class ResponseError(RedisError):
    """
    An error reply sent by the server

    The error ``kind`` is the first word of the error as sent by
    the server (``ERR``, ``WRONGTYPE`` etc) and ``message`` the remaining text.
    """

    def __init__(self, message: str, kind: str = "ERR") -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.kind} {self.message}" if self.message else self.kind


class WrongTypeError(ResponseError):
    """
    Raised when an operation is performed on a key
    containing a datatype that doesn't support the operation
    """


class UnknownCommandError(ResponseError):
    """
    Raised when the server does not support a command
    """


class NoProtoError(ResponseError):
    """
    Raised when the server does not support the requested protocol version
    """


class BusyLoadingError(ResponseError):
    """
    Raised when the server is still loading its dataset into memory
    """


class ReadOnlyError(ResponseError):
    """
    Raised when a write is attempted against a read only replica
    """


class AuthenticationRequiredError(ResponseError):
    """
    Raised when authentication parameters are required
    but not provided
    """
