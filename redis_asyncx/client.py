from __future__ import annotations

from typing import Any, cast

from redis_asyncx._utils import b, nativestr
from redis_asyncx.commands.core import CoreCommands
from redis_asyncx.connection import (
    BaseConnection,
    BaseConnectionParams,
    ConnectionState,
    TCPConnection,
    TCPLocation,
    UnixDomainSocketConnection,
    UnixDomainSocketLocation,
    parse_address,
)
from redis_asyncx.exceptions import ConnectionError
from redis_asyncx.response._callbacks import NoopCallback, ResponseCallback
from redis_asyncx.response.types import Array, Map, Value
from redis_asyncx.typing import ProtocolVersion, R, Self, StringT, Unpack, ValueT


class Client(CoreCommands):
    """
    Redis client bound to a single connection

    ::

        async with Client("localhost", 6379) as client:
            await client.set("fu", "bar")
            assert (await client.get("fu")).value == b"bar"

    The client does not reconnect. Once the underlying connection was closed
    (explicitly or because of a transport failure, timeout or cancellation)
    a new client must be created.
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 6379,
        *,
        unix_socket_path: str | None = None,
        protocol_version: ProtocolVersion = 2,
        **connection_params: Unpack[BaseConnectionParams],
    ) -> None:
        """
        :param host: The hostname of the redis server
        :param port: The port the redis server is listening on
        :param unix_socket_path: The path to a unix socket to connect to
         instead of :paramref:`host` and :paramref:`port`
        :param protocol_version: The protocol version to switch to with ``HELLO``
         once connected.
        :param connection_params: Additional parameters passed to the connection.
         See :class:`~redis_asyncx.connection.BaseConnectionParams`.
        """
        self.connection: BaseConnection
        if unix_socket_path:
            self.connection = UnixDomainSocketConnection(
                UnixDomainSocketLocation(unix_socket_path), **connection_params
            )
        else:
            self.connection = TCPConnection(TCPLocation(host, port), **connection_params)
        self._requested_protocol_version = protocol_version
        self.encoding = connection_params.get("encoding", "utf-8")

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> Client:
        """
        Return a client configured from the given URL, which must use
        either the ``redis://`` scheme or the ``unix://`` scheme for
        Unix domain sockets.

        For example:

        - ``redis://localhost:6379``
        - ``unix:///path/to/socket.sock``
        """
        if not url.startswith(("redis://", "unix://")):
            raise ValueError(f"Unsupported url {url!r}. Expected redis:// or unix://")
        location = parse_address(url)
        if isinstance(location, UnixDomainSocketLocation):
            return cls(unix_socket_path=location.path, **kwargs)
        location = cast(TCPLocation, location)
        return cls(location.host, location.port, **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}<{self.connection.describe()}>"

    @property
    def protocol_version(self) -> ProtocolVersion:
        """
        The protocol version currently in effect on the connection
        """
        return self.connection.protocol_version

    async def connect(self) -> Self:
        """
        Establish the connection and, if a protocol version other than
        the default was requested, switch to it.

        :raises: :exc:`~redis_asyncx.exceptions.ConnectionError` if the server
         could not be reached or :exc:`~redis_asyncx.exceptions.NegotiationError`
         if the requested protocol version was rejected.
        """
        await self.connection.connect()
        if self._requested_protocol_version != self.connection.protocol_version:
            try:
                await self.connection.negotiate(self._requested_protocol_version)
            except BaseException:
                await self.connection.aclose()
                raise
        return self

    async def close(self) -> None:
        """
        Close the connection. Calling this more than once is harmless.
        """
        await self.connection.aclose()

    async def __aenter__(self) -> Self:
        if self.connection.state == ConnectionState.CONNECTING:
            await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def execute_command(
        self,
        command: StringT,
        *args: ValueT,
        callback: ResponseCallback[R] = NoopCallback(),  # type: ignore[assignment]
    ) -> R:
        """
        Execute an arbitrary command and return the reply narrowed
        by :paramref:`callback`. Without a callback the reply
        is returned as is, unless it is an error reply in which case the
        matching :exc:`~redis_asyncx.exceptions.ResponseError` is raised.
        """
        if not isinstance(command, bytes):
            command = b(command, self.encoding)
        response: Value = await self.connection.execute(command, *args)
        return callback(nativestr(command, self.encoding), response, self.protocol_version)

    async def negotiate(self, protocol_version: int) -> Map | Array:
        """
        Switch the protocol version of the connection

        :raises: :exc:`~redis_asyncx.exceptions.NegotiationError`
        """
        if not self.connection.is_connected:
            raise ConnectionError("Connection not established")
        return await self.connection.negotiate(protocol_version)
