from __future__ import annotations

from urllib.parse import unquote, urlparse

from redis_asyncx.typing import Union, Unpack

from ._base import BaseConnection, BaseConnectionParams, Location
from ._tcp import TCPConnection, TCPLocation
from ._uds import UnixDomainSocketConnection, UnixDomainSocketLocation

#: The forms of server addresses accepted by :func:`connect`
Address = Union[str, tuple[str, int], Location]


def parse_address(address: Address) -> Location:
    """
    Convert an address to a :class:`~redis_asyncx.connection.Location`.

    Accepted forms::

        "127.0.0.1:6379"
        "localhost"                 # default port 6379
        ("localhost", 6379)
        "redis://localhost:6379"
        "unix:///tmp/redis.sock"
        TCPLocation("localhost", 6379)
    """
    if isinstance(address, Location):
        return address
    if isinstance(address, tuple):
        host, port = address
        return TCPLocation(host, int(port))
    if "://" in address:
        url = urlparse(address)
        if url.scheme == "unix":
            return UnixDomainSocketLocation(unquote(url.path))
        if url.scheme == "redis":
            return TCPLocation(url.hostname or "127.0.0.1", url.port or 6379)
        raise ValueError(f"Unsupported address scheme {url.scheme!r} in {address!r}")
    host, sep, port = address.rpartition(":")
    if not sep:
        return TCPLocation(address, 6379)
    try:
        return TCPLocation(host.strip("[]"), int(port))
    except ValueError:
        raise ValueError(f"Invalid port in address {address!r}") from None


async def connect(address: Address, **kwargs: Unpack[BaseConnectionParams]) -> BaseConnection:
    """
    Open a connection to the redis server at :paramref:`address`. The
    returned connection speaks RESP2 until :meth:`~BaseConnection.negotiate`
    is called.

    :raises: :exc:`~redis_asyncx.exceptions.ConnectionError` if the server
     could not be reached
    """
    location = parse_address(address)
    connection: BaseConnection
    if isinstance(location, UnixDomainSocketLocation):
        connection = UnixDomainSocketConnection(location, **kwargs)
    elif isinstance(location, TCPLocation):
        connection = TCPConnection(location, **kwargs)
    else:
        raise ValueError(f"Unsupported location {location!r}")
    return await connection.connect()
