from __future__ import annotations

import contextlib
import socket

import anyio
import pytest
from anyio.abc import ByteStream, SocketAttribute
from packaging import version

from redis_asyncx import Client
from redis_asyncx.parser import Parser
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
    Push,
    Set,
    SimpleString,
    Value,
    VerbatimString,
)

REDIS_VERSIONS = {}


def encode_as_reply(value: Value, protocol_version: int = 3) -> bytes:
    """
    Inverse of the parser, used to synthesize wire fixtures.
    Under protocol version 2 nulls are encoded as null bulk strings and
    maps as flat arrays.
    """
    if isinstance(value, SimpleString):
        return b"+%s\r\n" % value.text.encode()
    if isinstance(value, Error):
        return b"-%s\r\n" % str(value).encode()
    if isinstance(value, Integer):
        return b":%d\r\n" % value.value
    if isinstance(value, BulkString):
        return b"$%d\r\n%s\r\n" % (len(value.value), value.value)
    if isinstance(value, Null):
        return b"_\r\n" if protocol_version == 3 else b"$-1\r\n"
    if isinstance(value, Boolean):
        return b"#t\r\n" if value.value else b"#f\r\n"
    if isinstance(value, Double):
        return b",%s\r\n" % repr(value.value).encode()
    if isinstance(value, BigNumber):
        return b"(%s\r\n" % value.value.encode()
    if isinstance(value, VerbatimString):
        payload = f"{value.format}:{value.text}".encode()
        return b"=%d\r\n%s\r\n" % (len(payload), payload)
    if isinstance(value, Map):
        if protocol_version == 2:
            return encode_as_reply(Array(tuple(v for pair in value.items for v in pair)), 2)
        return b"%%%d\r\n" % len(value.items) + b"".join(
            encode_as_reply(k, protocol_version) + encode_as_reply(v, protocol_version)
            for k, v in value.items
        )
    for aggregate, marker in ((Set, b"~"), (Push, b">"), (Array, b"*")):
        if isinstance(value, aggregate):
            return b"%s%d\r\n" % (marker, len(value.items)) + b"".join(
                encode_as_reply(item, protocol_version) for item in value.items
            )
    raise TypeError(f"Unable to encode {value!r}")


def null_array(protocol_version: int) -> bytes:
    return b"_\r\n" if protocol_version == 3 else b"*-1\r\n"


#: Canned reply that makes the fake server drop the connection
DISCONNECT = object()
#: Canned reply that makes the fake server never respond
SILENCE = object()


class _Disconnect(Exception):
    pass


class FakeRedis:
    """
    In process server speaking enough of the redis protocol
    to exercise the client: an in memory keyspace for the supported
    commands and ``HELLO`` based protocol switching.

    Replies for a command can be replaced through :attr:`canned` by raw
    bytes, :data:`DISCONNECT`, :data:`SILENCE` or a list of those sent in
    order. Replies are written :attr:`chunk_size` bytes at a time when it is set.
    """

    def __init__(self, unix_socket_path: str | None = None) -> None:
        self.unix_socket_path = unix_socket_path
        self.port = 0
        self.data: dict[bytes, bytes | list[bytes]] = {}
        self.expiry: dict[bytes, int] = {}
        self.received: list[list[bytes]] = []
        self.canned: dict[bytes, object] = {}
        self.chunk_size: int | None = None
        self.protocol_version = 2
        self._stack = contextlib.AsyncExitStack()

    async def __aenter__(self) -> FakeRedis:
        if self.unix_socket_path:
            listener = await anyio.create_unix_listener(self.unix_socket_path)
        else:
            listener = await anyio.create_tcp_listener(local_host="127.0.0.1", local_port=0)
            self.port = listener.extra(SocketAttribute.local_port)
        await self._stack.enter_async_context(listener)
        task_group = await self._stack.enter_async_context(anyio.create_task_group())
        self._stack.callback(task_group.cancel_scope.cancel)
        task_group.start_soon(listener.serve, self._handle)
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._stack.aclose()

    async def _handle(self, stream: ByteStream) -> None:
        parser = Parser()
        async with stream:
            while True:
                try:
                    data = await stream.receive()
                    await self._reply(stream, parser.feed(data))
                except (anyio.EndOfStream, anyio.BrokenResourceError, OSError, _Disconnect):
                    return

    async def _reply(self, stream: ByteStream, requests: list[Value]) -> None:
        for request in requests:
            args = [item.value for item in request]
            self.received.append(args)
            reply = self.canned.get(args[0].upper())
            if reply is None:
                reply = self.dispatch(args)
            for piece in reply if isinstance(reply, list) else [reply]:
                if piece is DISCONNECT:
                    raise _Disconnect
                if piece is not SILENCE:
                    await self._send(stream, piece)

    async def _send(self, stream: ByteStream, reply: bytes) -> None:
        if not self.chunk_size:
            await stream.send(reply)
            return
        for offset in range(0, len(reply), self.chunk_size):
            await stream.send(reply[offset : offset + self.chunk_size])
            await anyio.sleep(0)

    def reply(self, value: Value) -> bytes:
        return encode_as_reply(value, self.protocol_version)

    def error(self, text: str) -> bytes:
        return self.reply(Error.from_text(text))

    def wrong_type(self) -> bytes:
        return self.error("WRONGTYPE Operation against a key holding the wrong kind of value")

    def dispatch(self, args: list[bytes]) -> bytes:
        command, *rest = args
        handler = getattr(self, f"do_{command.decode().lower()}", None)
        if handler is None:
            return self.error(
                f"ERR unknown command '{command.decode()}', with args beginning with: "
            )
        try:
            return handler(*rest)
        except TypeError:
            return self.error(
                f"ERR wrong number of arguments for '{command.decode().lower()}' command"
            )

    def do_ping(self, message: bytes | None = None) -> bytes:
        if message is None:
            return self.reply(SimpleString("PONG"))
        return self.reply(BulkString(message))

    def do_hello(self, protover: bytes | None = None) -> bytes:
        if protover is not None:
            if protover not in (b"2", b"3"):
                return self.error("NOPROTO unsupported protocol version")
            self.protocol_version = int(protover)
        return self.reply(
            Map(
                (
                    (BulkString(b"server"), BulkString(b"redis")),
                    (BulkString(b"version"), BulkString(b"7.2.0")),
                    (BulkString(b"proto"), Integer(self.protocol_version)),
                    (BulkString(b"id"), Integer(1)),
                    (BulkString(b"mode"), BulkString(b"standalone")),
                    (BulkString(b"role"), BulkString(b"master")),
                    (BulkString(b"modules"), Array()),
                )
            )
        )

    def do_set(self, key: bytes, value: bytes, *options: bytes) -> bytes:
        flags = [option.upper() for option in options]
        if b"NX" in flags and key in self.data or b"XX" in flags and key not in self.data:
            return self.reply(NULL)
        self.data[key] = value
        self.expiry.pop(key, None)
        for ttl_option, scale in ((b"EX", 1), (b"PX", 1000)):
            if ttl_option in flags:
                self.expiry[key] = int(options[flags.index(ttl_option) + 1]) // scale
        return self.reply(SimpleString("OK"))

    def do_get(self, key: bytes) -> bytes:
        value = self.data.get(key)
        if value is None:
            return self.reply(NULL)
        if isinstance(value, list):
            return self.wrong_type()
        return self.reply(BulkString(value))

    def do_getex(self, key: bytes, *options: bytes) -> bytes:
        flags = [option.upper() for option in options]
        if key in self.data:
            if b"PERSIST" in flags:
                self.expiry.pop(key, None)
            if b"EX" in flags:
                self.expiry[key] = int(options[flags.index(b"EX") + 1])
        return self.do_get(key)

    def do_del(self, *keys: bytes) -> bytes:
        if not keys:
            raise TypeError
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return self.reply(Integer(removed))

    def do_exists(self, *keys: bytes) -> bytes:
        if not keys:
            raise TypeError
        return self.reply(Integer(sum(key in self.data for key in keys)))

    def do_expire(self, key: bytes, seconds: bytes) -> bytes:
        if key not in self.data:
            return self.reply(Integer(0))
        if int(seconds) <= 0:
            self.do_del(key)
        else:
            self.expiry[key] = int(seconds)
        return self.reply(Integer(1))

    def do_ttl(self, key: bytes) -> bytes:
        if key not in self.data:
            return self.reply(Integer(-2))
        return self.reply(Integer(self.expiry.get(key, -1)))

    def _increment(self, key: bytes, amount: int) -> bytes:
        value = self.data.get(key, b"0")
        if isinstance(value, list):
            return self.wrong_type()
        try:
            result = int(value) + amount
        except ValueError:
            return self.error("ERR value is not an integer or out of range")
        self.data[key] = b"%d" % result
        return self.reply(Integer(result))

    def do_incr(self, key: bytes) -> bytes:
        return self._increment(key, 1)

    def do_decr(self, key: bytes) -> bytes:
        return self._increment(key, -1)

    def _list(self, key: bytes) -> list[bytes] | None:
        value = self.data.setdefault(key, [])
        return value if isinstance(value, list) else None

    def do_lpush(self, key: bytes, *elements: bytes) -> bytes:
        if not elements:
            raise TypeError
        if (items := self._list(key)) is None:
            return self.wrong_type()
        for element in elements:
            items.insert(0, element)
        return self.reply(Integer(len(items)))

    def do_rpush(self, key: bytes, *elements: bytes) -> bytes:
        if not elements:
            raise TypeError
        if (items := self._list(key)) is None:
            return self.wrong_type()
        items.extend(elements)
        return self.reply(Integer(len(items)))

    def _pop(self, key: bytes, count: bytes | None, head: bool) -> bytes:
        items = self.data.get(key)
        if items is None:
            return self.reply(NULL) if count is None else null_array(self.protocol_version)
        if not isinstance(items, list):
            return self.wrong_type()
        popped = []
        for _ in range(1 if count is None else int(count)):
            if not items:
                break
            popped.append(items.pop(0 if head else -1))
        if not items:
            self.data.pop(key)
        if count is None:
            return self.reply(BulkString(popped[0]))
        return self.reply(Array(tuple(BulkString(item) for item in popped)))

    def do_lpop(self, key: bytes, count: bytes | None = None) -> bytes:
        return self._pop(key, count, True)

    def do_rpop(self, key: bytes, count: bytes | None = None) -> bytes:
        return self._pop(key, count, False)

    def do_lrange(self, key: bytes, start: bytes, stop: bytes) -> bytes:
        items = self.data.get(key, [])
        if not isinstance(items, list):
            return self.wrong_type()
        first, last = int(start), int(stop)
        if first < 0:
            first = max(len(items) + first, 0)
        if last < 0:
            last = len(items) + last
        return self.reply(Array(tuple(BulkString(item) for item in items[first : last + 1])))


@pytest.fixture
async def fake_redis():
    async with FakeRedis() as server:
        yield server


@pytest.fixture
async def client(fake_redis):
    async with Client("127.0.0.1", fake_redis.port, stream_timeout=5) as client:
        yield client


def redis_available(host: str = "localhost", port: int = 6379) -> bool:
    try:
        with socket.create_connection((host, port), timeout=0.5):
            return True
    except OSError:
        return False


async def get_version(client: Client) -> version.Version:
    if str(client) not in REDIS_VERSIONS:
        info = await client.execute_command("INFO", "server")
        fields = dict(
            line.split(":", 1) for line in info.decode().splitlines() if ":" in line
        )
        REDIS_VERSIONS[str(client)] = version.parse(fields["redis_version"])
    return REDIS_VERSIONS[str(client)]


@pytest.fixture
async def redis_basic(request):
    if not redis_available():
        pytest.skip("redis server not available at localhost:6379")
    async with Client("localhost", 6379, stream_timeout=5) as client:
        client_version = await get_version(client)
        for marker in request.node.iter_markers("min_server_version"):
            if client_version < version.parse(marker.args[0]):
                pytest.skip(f"Skipped for versions < {marker.args[0]}")
        await client.execute_command("FLUSHDB")
        yield client
        await client.execute_command("FLUSHDB")