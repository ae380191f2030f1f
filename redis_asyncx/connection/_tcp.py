from __future__ import annotations

import dataclasses
import socket

from anyio import connect_tcp, fail_after
from anyio.abc import ByteStream, SocketAttribute

from redis_asyncx.typing import Unpack

from ._base import BaseConnection, BaseConnectionParams, Location


@dataclasses.dataclass(unsafe_hash=True)
class TCPLocation(Location):
    """Host and port of a redis server reachable over TCP"""

    host: str = "127.0.0.1"
    port: int = 6379

    def __str__(self) -> str:
        return f"host={self.host},port={self.port}"


class TCPConnection(BaseConnection):
    """
    Connection to a redis server over TCP. Exported as
    :class:`redis_asyncx.Connection` since it is the default transport.
    """

    location: TCPLocation

    def __init__(
        self,
        location: TCPLocation | None = None,
        *,
        socket_keepalive: bool = False,
        **kwargs: Unpack[BaseConnectionParams],
    ):
        """
        :param location: The server to connect to (defaults to ``127.0.0.1:6379``)
        :param socket_keepalive: Enable ``SO_KEEPALIVE`` on the socket
        """
        super().__init__(location or TCPLocation(), **kwargs)
        self.socket_keepalive = socket_keepalive

    @property
    def host(self) -> str:
        return self.location.host

    @property
    def port(self) -> int:
        return self.location.port

    async def _connect(self) -> ByteStream:
        with fail_after(self._connect_timeout):
            stream = await connect_tcp(self.host, self.port)
        if self.socket_keepalive:
            raw_socket = stream.extra(SocketAttribute.raw_socket)
            raw_socket.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
        return stream

    def describe(self) -> str:
        return f"Connection<{self.location}>"
