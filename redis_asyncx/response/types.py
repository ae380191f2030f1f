"""
redis_asyncx.response.types
---------------------------

Typed representation of every RESP2 & RESP3 data type. Values are
independent of the wire encoding they were received with.

.. note:: Null normalization is lossy. A RESP2 null bulk string (``$-1``),
   a RESP2 null array (``*-1``) and the RESP3 null (``_``) are all represented
   by the single :data:`NULL` instance of :class:`Null`. Callers can not
   recover which wire shape produced a null.
"""

from __future__ import annotations

import dataclasses

from redis_asyncx.typing import ClassVar, Final, Iterator, StringT


class Value:
    """
    Base class for all reply values
    """

    __slots__ = ()

    #: The data types that can be produced by a RESP2 speaking server
    resp2: ClassVar[bool] = True


@dataclasses.dataclass(frozen=True, slots=True)
class SimpleString(Value):
    """Short, non binary safe status text (``+OK``)"""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclasses.dataclass(frozen=True, slots=True)
class Error(Value):
    """
    An error reply. ``kind`` is the leading error code (``ERR``, ``WRONGTYPE`` ...)
    and ``message`` the human readable remainder.
    """

    kind: str
    message: str

    @classmethod
    def from_text(cls, text: str) -> Error:
        kind, _, message = text.partition(" ")
        return cls(kind, message)

    def __str__(self) -> str:
        return f"{self.kind} {self.message}" if self.message else self.kind


@dataclasses.dataclass(frozen=True, slots=True)
class Integer(Value):
    value: int

    def __int__(self) -> int:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class BulkString(Value):
    """
    Binary safe string. A null bulk string is represented by :data:`NULL`
    and not by a :class:`BulkString`.
    """

    value: bytes

    def __bytes__(self) -> bytes:
        return self.value

    def decode(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self.value.decode(encoding, errors)


class _Aggregate(Value):
    __slots__ = ()

    items: tuple[Value, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __getitem__(self, index: int) -> Value:
        return self.items[index]


@dataclasses.dataclass(frozen=True, slots=True)
class Array(_Aggregate):
    items: tuple[Value, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class Null(Value):
    """The unified null value (see the module notes on normalization)"""

    def __bool__(self) -> bool:
        return False


@dataclasses.dataclass(frozen=True, slots=True)
class Boolean(Value):
    resp2: ClassVar[bool] = False

    value: bool

    def __bool__(self) -> bool:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class Double(Value):
    resp2: ClassVar[bool] = False

    value: float

    def __float__(self) -> float:
        return self.value


@dataclasses.dataclass(frozen=True, slots=True)
class BigNumber(Value):
    """Arbitrary precision integer, kept as its decimal text"""

    resp2: ClassVar[bool] = False

    value: str

    def __int__(self) -> int:
        return int(self.value)


@dataclasses.dataclass(frozen=True, slots=True)
class Map(Value):
    """
    Ordered sequence of key/value pairs. Keys are not required to be
    hashable (they may be aggregates) which is why a ``dict`` is not used.
    """

    resp2: ClassVar[bool] = False

    items: tuple[tuple[Value, Value], ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[tuple[Value, Value]]:
        return iter(self.items)

    def get(self, key: StringT, default: Value | None = None) -> Value | None:
        """
        Lookup the value for a string key (matched against
        :class:`SimpleString` and :class:`BulkString` keys)
        """
        for k, v in self.items:
            if _matches(k, key):
                return v
        return default


@dataclasses.dataclass(frozen=True, slots=True)
class Set(_Aggregate):
    """Members in the order they were sent (the type is semantically unordered)"""

    resp2: ClassVar[bool] = False

    items: tuple[Value, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class Push(_Aggregate):
    """Out of band data pushed by the server"""

    resp2: ClassVar[bool] = False

    items: tuple[Value, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class VerbatimString(Value):
    resp2: ClassVar[bool] = False

    #: Three character format tag (``txt``, ``mkd``)
    format: str
    text: str

    def __str__(self) -> str:
        return self.text


#: The single null instance
NULL: Final[Null] = Null()


def _matches(value: Value, key: StringT) -> bool:
    if isinstance(value, SimpleString):
        return value.text == (key if isinstance(key, str) else key.decode("utf-8", "replace"))
    if isinstance(value, BulkString):
        return value.value == (key if isinstance(key, bytes) else key.encode("utf-8"))
    return False


def flat_get(items: tuple[Value, ...], key: StringT) -> Value | None:
    """
    Lookup a value by key in a flat ``[key, value, key, value ...]`` array
    which is how RESP2 represents map like replies.
    """
    for k, v in zip(items[::2], items[1::2]):
        if _matches(k, key):
            return v
    return None
