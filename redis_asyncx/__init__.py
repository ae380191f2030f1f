"""
redis_asyncx
------------

redis_asyncx is an async redis client speaking both RESP2 and RESP3
over a single connection.
"""

from __future__ import annotations

import logging

from redis_asyncx.client import Client
from redis_asyncx.commands.constants import PureToken
from redis_asyncx.config import Config
from redis_asyncx.connection import (
    BaseConnection,
    Connection,
    UnixDomainSocketConnection,
    connect,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = [
    "BaseConnection",
    "Client",
    "Config",
    "Connection",
    "PureToken",
    "UnixDomainSocketConnection",
    "connect",
]

__version__ = "0.1.0"
