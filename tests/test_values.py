from __future__ import annotations

import dataclasses

import pytest
import typing_extensions

from redis_asyncx import typing as redis_typing
from redis_asyncx.connection import BaseConnectionParams
from redis_asyncx.exceptions import (
    BusyLoadingError,
    NoProtoError,
    ResponseError,
    UnexpectedResponseError,
    UnknownCommandError,
    WrongTypeError,
)
from redis_asyncx.response._callbacks import (
    ArrayCallback,
    HelloCallback,
    IntCallback,
    NoopCallback,
    OptionalBulkStringCallback,
    TypeCallback,
    parse_error,
)
from redis_asyncx.response.types import (
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
    SimpleString,
    flat_get,
)


class TestValues:
    def test_frozen(self):
        value = BulkString(b"value")
        with pytest.raises(dataclasses.FrozenInstanceError):
            value.value = b"other"

    def test_equality(self):
        assert Array((Integer(1), NULL)) == Array((Integer(1), Null()))
        assert BulkString(b"1") != SimpleString("1")
        assert Integer(1) != Boolean(True)

    def test_null_is_falsy(self):
        assert not NULL
        assert BulkString(b"") != NULL

    def test_aggregates_are_sequences(self):
        array = Array((Integer(1), Integer(2)))
        assert len(array) == 2
        assert list(array) == [Integer(1), Integer(2)]
        assert array[-1] == Integer(2)

    def test_conversions(self):
        assert int(Integer(3)) == 3
        assert int(BigNumber("12345678901234567890")) == 12345678901234567890
        assert float(Double(1.5)) == 1.5
        assert bytes(BulkString(b"raw")) == b"raw"
        assert BulkString("世界".encode()).decode() == "世界"
        assert str(SimpleString("OK")) == "OK"
        assert str(Error("WRONGTYPE", "bad")) == "WRONGTYPE bad"

    def test_flat_get(self):
        items = (BulkString(b"server"), BulkString(b"redis"), SimpleString("proto"), Integer(2))
        assert flat_get(items, "proto") == Integer(2)
        assert flat_get(items, b"server") == BulkString(b"redis")
        assert flat_get(items, "version") is None

    def test_resp2_flags(self):
        for value_type in (SimpleString, Error, Integer, BulkString, Array, Null):
            assert value_type.resp2
        for value_type in (Boolean, Double, BigNumber, Map):
            assert not value_type.resp2


class TestErrors:
    @pytest.mark.parametrize(
        "error, exception_class",
        [
            (Error("ERR", "unknown command 'FOO'"), UnknownCommandError),
            (Error("ERR", "syntax error"), ResponseError),
            (Error("WRONGTYPE", "Operation against a key"), WrongTypeError),
            (Error("NOPROTO", "unsupported protocol version"), NoProtoError),
            (Error("LOADING", "Redis is loading the dataset in memory"), BusyLoadingError),
            (Error("CUSTOM", "whatever"), ResponseError),
        ],
    )
    def test_parse_error(self, error, exception_class):
        exception = parse_error(error)
        assert type(exception) is exception_class
        assert exception.kind == error.kind
        assert exception.message == error.message
        assert str(exception) == str(error)


class TestCallbacks:
    def test_error_reply_raises(self):
        with pytest.raises(WrongTypeError) as exc_info:
            IntCallback()("INCR", Error("WRONGTYPE", "Operation against a key"))
        assert exc_info.value.kind == "WRONGTYPE"

    def test_noop(self):
        assert NoopCallback()("GET", NULL) is NULL

    def test_type_mismatch(self):
        with pytest.raises(UnexpectedResponseError) as exc_info:
            IntCallback()("INCR", BulkString(b"1"))
        assert exc_info.value.command == "INCR"
        assert exc_info.value.response == BulkString(b"1")

    def test_optional(self):
        callback = OptionalBulkStringCallback()
        assert callback("GET", NULL) is NULL
        assert callback("GET", BulkString(b"v")) == BulkString(b"v")
        with pytest.raises(UnexpectedResponseError):
            callback("GET", Integer(1))

    def test_array(self):
        assert ArrayCallback()("LRANGE", Array()) == Array()
        with pytest.raises(UnexpectedResponseError):
            ArrayCallback()("LRANGE", NULL)
        assert ArrayCallback(optional=True)("LPOP", NULL) is NULL

    def test_type_callback_versions(self):
        callback = TypeCallback(SimpleString, BulkString)
        assert callback("PING", SimpleString("PONG"), 3) == SimpleString("PONG")
        with pytest.raises(UnexpectedResponseError):
            callback("PING", Integer(1), 2)

    def test_hello(self):
        resp3 = Map(((SimpleString("proto"), Integer(3)),))
        resp2 = Array((BulkString(b"proto"), Integer(2)))
        assert HelloCallback()("HELLO", resp3, 3) == resp3
        assert HelloCallback()("HELLO", resp2, 2) == resp2
        assert HelloCallback.protocol(resp3) == 3
        assert HelloCallback.protocol(resp2) == 2
        with pytest.raises(UnexpectedResponseError):
            HelloCallback()("HELLO", Array((BulkString(b"server"), BulkString(b"redis"))))


def test_typing_names_resolve_on_all_supported_versions():
    assert redis_typing.NotRequired is typing_extensions.NotRequired
    assert redis_typing.TypedDict is typing_extensions.TypedDict
    assert set(BaseConnectionParams.__annotations__) == {
        "stream_timeout",
        "connect_timeout",
        "encoding",
        "max_push_messages",
    }
