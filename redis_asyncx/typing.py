"""
Type aliases shared across the package and the typing names the modules
import from one place.
"""

from __future__ import annotations

from collections.abc import (
    Awaitable,
    Callable,
    Iterable,
    Iterator,
    Set,
    ValuesView,
)
from typing import (
    TYPE_CHECKING,
    ClassVar,
    Final,
    Generic,
    Literal,
    NamedTuple,
    ParamSpec,
    TypeVar,
    Union,
)

from typing_extensions import NotRequired, Self, TypedDict, Unpack

T_co = TypeVar("T_co", covariant=True)
R = TypeVar("R")

#: A redis key
KeyT = str | bytes

#: Python values accepted as command arguments. :class:`str` is encoded
#: with the connection encoding, numbers are sent as their decimal text.
ValueT = str | bytes | int | float

#: Textual command arguments (command names, tokens)
StringT = str | bytes

#: Containers accepted by commands taking a variable number of keys or
#: elements. :class:`str` is deliberately excluded even though it is iterable::
#:
#:     await client.delete(["a", "b"])   # valid
#:     await client.lpush("l", ("a",))   # valid
#:     await client.delete("ab")         # invalid
Parameters = list[T_co] | Set[T_co] | tuple[T_co, ...] | ValuesView[T_co] | Iterator[T_co]

#: RESP protocol generation spoken on a connection
ProtocolVersion = Literal[2, 3]

__all__ = [
    "Awaitable",
    "Callable",
    "ClassVar",
    "Final",
    "Generic",
    "Iterable",
    "Iterator",
    "KeyT",
    "Literal",
    "NamedTuple",
    "NotRequired",
    "Parameters",
    "ParamSpec",
    "ProtocolVersion",
    "R",
    "Self",
    "Set",
    "StringT",
    "TYPE_CHECKING",
    "TypedDict",
    "TypeVar",
    "Union",
    "Unpack",
    "ValueT",
]
