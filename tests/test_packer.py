from __future__ import annotations

import pytest

from redis_asyncx._packer import Packer, encode
from redis_asyncx.commands.constants import CommandName, PureToken
from redis_asyncx.parser import Parser
from redis_asyncx.response.types import Array, BulkString


@pytest.fixture
def packer():
    return Packer()


class TestPacker:
    def test_command_without_arguments(self, packer):
        assert packer.pack_command(CommandName.PING) == [b"*1\r\n$4\r\nPING\r\n"]

    def test_argument_types(self, packer):
        assert b"".join(packer.pack_command(b"SET", "key", 1)) == (
            b"*3\r\n$3\r\nSET\r\n$3\r\nkey\r\n$1\r\n1\r\n"
        )
        assert b"".join(packer.pack_command(b"ECHO", -12)) == b"*2\r\n$4\r\nECHO\r\n$3\r\n-12\r\n"
        assert b"".join(packer.pack_command(b"ECHO", 1.5)) == b"*2\r\n$4\r\nECHO\r\n$3\r\n1.5\r\n"
        assert (
            b"".join(packer.pack_command(b"ECHO", bytearray(b"ab")))
            == b"*2\r\n$4\r\nECHO\r\n$2\r\nab\r\n"
        )

    def test_tokens(self, packer):
        assert b"".join(packer.pack_command(CommandName.SET, "k", "v", PureToken.NX)) == (
            b"*4\r\n$3\r\nSET\r\n$1\r\nk\r\n$1\r\nv\r\n$2\r\nNX\r\n"
        )

    def test_binary_safe(self, packer):
        value = b"\r\n\x00\xff"
        assert b"".join(packer.pack_command(b"ECHO", value)) == (
            b"*2\r\n$4\r\nECHO\r\n$4\r\n\r\n\x00\xff\r\n"
        )

    def test_multi_word_command(self, packer):
        assert b"".join(packer.pack_command(b"CONFIG GET", "maxmemory")) == (
            b"*3\r\n$6\r\nCONFIG\r\n$3\r\nGET\r\n$9\r\nmaxmemory\r\n"
        )

    def test_encoding(self):
        assert Packer("utf-8").encode("世界") == "世界".encode()
        assert Packer("latin-1").encode("é") == b"\xe9"

    def test_invalid_argument(self, packer):
        with pytest.raises(TypeError):
            packer.pack_command(b"ECHO", None)

    def test_large_arguments_are_chunked(self, packer):
        value = b"x" * 10000
        chunks = packer.pack_command(b"SET", "key", value)
        assert value in chunks
        [request] = Parser().feed(b"".join(chunks))
        assert request == Array((BulkString(b"SET"), BulkString(b"key"), BulkString(value)))


def test_encode():
    assert encode([b"SET", "key", 1]) == b"*3\r\n$3\r\nSET\r\n$3\r\nkey\r\n$1\r\n1\r\n"
    assert encode(["LRANGE", "l", 0, -1]) == (
        b"*4\r\n$6\r\nLRANGE\r\n$1\r\nl\r\n$1\r\n0\r\n$2\r\n-1\r\n"
    )
