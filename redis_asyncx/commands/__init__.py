"""
redis_asyncx.commands
---------------------
Typed methods for the redis commands supported by the client along with
the validators and constants they are built from.
"""

from __future__ import annotations

from ._validators import MutuallyExclusiveParametersError
from .constants import CommandName, PureToken
from .core import CoreCommands

__all__ = [
    "CommandName",
    "CoreCommands",
    "MutuallyExclusiveParametersError",
    "PureToken",
]
