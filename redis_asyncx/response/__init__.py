from __future__ import annotations

from .types import (
    NULL,
    Array,
    BigNumber,
    Boolean,
    BulkString,
    Double,
    Error,
    Integer,
    Map,
    Null,
    Push,
    Set,
    SimpleString,
    Value,
    VerbatimString,
)

__all__ = [
    "NULL",
    "Array",
    "BigNumber",
    "Boolean",
    "BulkString",
    "Double",
    "Error",
    "Integer",
    "Map",
    "Null",
    "Push",
    "Set",
    "SimpleString",
    "Value",
    "VerbatimString",
]
