from __future__ import annotations

from ._base import BaseConnection, BaseConnectionParams, ConnectionState, Location
from ._connect import Address, connect, parse_address
from ._tcp import TCPConnection, TCPLocation
from ._uds import UnixDomainSocketConnection, UnixDomainSocketLocation

#: The default connection type
Connection = TCPConnection
__all__ = [
    "Address",
    "BaseConnectionParams",
    "BaseConnection",
    "Connection",
    "ConnectionState",
    "TCPConnection",
    "Location",
    "TCPLocation",
    "UnixDomainSocketLocation",
    "UnixDomainSocketConnection",
    "connect",
    "parse_address",
]
