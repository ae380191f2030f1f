from __future__ import annotations

import os

_TRUTHY = ["1", "true", "t"]


class __Config:
    def __init__(self) -> None:
        self.__optimized: bool = False
        self.__strict_protocol: bool | None = None

    @property
    def strict_protocol(self) -> bool:
        """
        Whether replies that use a data type which does not belong to the
        negotiated protocol version (for example a RESP3 map while the connection
        is still speaking RESP2) should raise :exc:`~redis_asyncx.exceptions.InvalidResponse`
        instead of only being logged.

        This can be enabled in any of the following ways:

          - By setting the environment variable ``REDIS_ASYNCX_STRICT_PROTOCOL`` to ``true``
          - By explicitly setting ``redis_asyncx.Config.strict_protocol = True``
        """
        if self.__strict_protocol is not None:
            return self.__strict_protocol
        return os.environ.get("REDIS_ASYNCX_STRICT_PROTOCOL", "").lower() in _TRUTHY

    @strict_protocol.setter
    def strict_protocol(self, value: bool | None) -> None:
        self.__strict_protocol = value

    @property
    def optimized(self) -> bool:
        """
        When ``optimized`` is ``True`` client side argument validation will be disabled.
        This can be enabled in any of the following ways:

          - By running python in optimized mode using the ``-O`` flag
          - By setting the environment variable ``REDIS_ASYNCX_OPTIMIZED`` to ``true``
          - By explicitly setting ``redis_asyncx.Config.optimized = True``

        """
        return (
            not __debug__
            or os.environ.get("REDIS_ASYNCX_OPTIMIZED", "").lower() in _TRUTHY
            or self.__optimized
        )

    @optimized.setter
    def optimized(self, value: bool) -> None:
        self.__optimized = value


#: Used to configure global behaviors of the redis_asyncx library
Config = __Config()
