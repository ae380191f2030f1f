"""
redis_asyncx.response._callbacks
--------------------------------
Callbacks that narrow a reply :class:`~redis_asyncx.response.types.Value`
to the shape expected by the command that was issued.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from redis_asyncx.exceptions import (
    AuthenticationRequiredError,
    BusyLoadingError,
    NoProtoError,
    ReadOnlyError,
    ResponseError,
    UnexpectedResponseError,
    UnknownCommandError,
    WrongTypeError,
)
from redis_asyncx.response.types import (
    Array,
    BulkString,
    Error,
    Integer,
    Map,
    Null,
    Value,
    flat_get,
)
from redis_asyncx.typing import Generic, ProtocolVersion, TypeVar, Union

R = TypeVar("R", bound=Value)

EXCEPTION_CLASSES: dict[str, Union[type[ResponseError], dict[str, type[ResponseError]]]] = {
    "ERR": {
        "unknown command": UnknownCommandError,
        "unknown subcommand": UnknownCommandError,
    },
    "LOADING": BusyLoadingError,
    "NOAUTH": AuthenticationRequiredError,
    "NOPROTO": NoProtoError,
    "READONLY": ReadOnlyError,
    "WRONGTYPE": WrongTypeError,
}


def parse_error(error: Error) -> ResponseError:
    """
    Map an error reply to the matching :exc:`~redis_asyncx.exceptions.ResponseError`
    subclass
    """
    exception_class = EXCEPTION_CLASSES.get(error.kind, ResponseError)
    if isinstance(exception_class, dict):
        options = exception_class.items()
        exception_class = ResponseError
        for err, exc in options:
            if error.message.lower().startswith(err):
                exception_class = exc
                break
    return exception_class(error.message, kind=error.kind)


class ResponseCallback(ABC, Generic[R]):
    #: human readable description of the accepted shape,
    #: used in error messages
    expected: str

    def __call__(
        self,
        command: str,
        response: Value,
        version: ProtocolVersion = 2,
    ) -> R:
        if isinstance(response, Error):
            raise parse_error(response)
        if version == 3:
            return self.transform_3(command, response)
        return self.transform(command, response)

    @abstractmethod
    def transform(self, command: str, response: Value) -> R:
        pass

    def transform_3(self, command: str, response: Value) -> R:
        return self.transform(command, response)

    def mismatch(self, command: str, response: Value) -> UnexpectedResponseError:
        return UnexpectedResponseError(command, response, self.expected)


class NoopCallback(ResponseCallback[Value]):
    expected = "any value"

    def transform(self, command: str, response: Value) -> Value:
        return response


class TypeCallback(ResponseCallback[R]):
    """
    Accept the reply only if it is an instance of one of :paramref:`types`
    """

    def __init__(self, *types: type[Value]) -> None:
        self.types = types
        self.expected = " or ".join(t.__name__ for t in types)

    def transform(self, command: str, response: Value) -> R:
        if not isinstance(response, self.types):
            raise self.mismatch(command, response)
        return response  # type: ignore[return-value]


class IntCallback(TypeCallback[Integer]):
    def __init__(self) -> None:
        super().__init__(Integer)


class OptionalBulkStringCallback(TypeCallback[Union[BulkString, Null]]):
    def __init__(self) -> None:
        super().__init__(BulkString, Null)


class ArrayCallback(TypeCallback[Union[Array, Null]]):
    def __init__(self, optional: bool = False) -> None:
        if optional:
            super().__init__(Array, Null)
        else:
            super().__init__(Array)


class HelloCallback(ResponseCallback[Union[Map, Array]]):
    """
    ``HELLO`` replies with a map under RESP3 and with a flat
    ``[key, value, ...]`` array under RESP2
    """

    expected = "Map or Array containing proto"

    @staticmethod
    def protocol(response: Value) -> int | None:
        """The ``proto`` field of a ``HELLO`` reply, if present"""
        proto: Value | None = None
        if isinstance(response, Map):
            proto = response.get("proto")
        elif isinstance(response, Array) and len(response) % 2 == 0:
            proto = flat_get(response.items, "proto")
        return proto.value if isinstance(proto, Integer) else None

    def transform(self, command: str, response: Value) -> Map | Array:
        if not isinstance(response, (Map, Array)) or self.protocol(response) is None:
            raise self.mismatch(command, response)
        return response
