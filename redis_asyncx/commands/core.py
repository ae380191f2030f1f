from __future__ import annotations

import datetime
from abc import ABC, abstractmethod

from redis_asyncx.commands._utils import (
    normalized_milliseconds,
    normalized_seconds,
    normalized_time_milliseconds,
    normalized_time_seconds,
)
from redis_asyncx.commands._validators import (
    ensure_integers,
    ensure_iterable_valid,
    mutually_exclusive_parameters,
)
from redis_asyncx.commands.constants import CommandName, PureToken
from redis_asyncx.response._callbacks import (
    ArrayCallback,
    HelloCallback,
    IntCallback,
    OptionalBulkStringCallback,
    ResponseCallback,
    TypeCallback,
)
from redis_asyncx.response.types import (
    Array,
    BulkString,
    Integer,
    Map,
    Null,
    SimpleString,
    Value,
)
from redis_asyncx.typing import KeyT, Parameters, StringT, TypeVar, ValueT

R = TypeVar("R", bound=Value)


class CoreCommands(ABC):
    """
    Typed methods for the supported redis commands. Each method validates
    its arguments, sends the command and narrows the reply to the shape
    the command is documented to return.

    Error replies are raised as :exc:`~redis_asyncx.exceptions.ResponseError`
    (or one of its subclasses) and replies of an unexpected shape as
    :exc:`~redis_asyncx.exceptions.UnexpectedResponseError`.
    """

    @abstractmethod
    async def execute_command(
        self, command: bytes, *args: ValueT, callback: ResponseCallback[R]
    ) -> R: ...

    @abstractmethod
    async def negotiate(self, protocol_version: int) -> Map | Array: ...

    async def hello(self, protover: int | None = None) -> Map | Array:
        """
        Handshake with the server, optionally switching the protocol version

        :param protover: The protocol version (``2`` or ``3``) to switch to.
         If not provided the server only reports the current connection state.
        :return: the server's connection properties. A :class:`Map` when
         the connection speaks RESP3 or a flat :class:`Array` of alternating
         keys and values under RESP2.
        :raises: :exc:`~redis_asyncx.exceptions.NegotiationError` if the switch
         was rejected.
        """
        if protover is None:
            return await self.execute_command(CommandName.HELLO, callback=HelloCallback())
        return await self.negotiate(protover)

    async def ping(self, message: StringT | None = None) -> SimpleString | BulkString:
        """
        Ping the server

        :return: ``PONG`` as a :class:`SimpleString` when no message is
         provided, otherwise :paramref:`message` echoed back as a :class:`BulkString`
        """
        pieces: list[ValueT] = []
        if message is not None:
            pieces.append(message)
        return await self.execute_command(
            CommandName.PING, *pieces, callback=TypeCallback(SimpleString, BulkString)
        )

    async def get(self, key: KeyT) -> BulkString | Null:
        """
        Get the value of a key

        :return: the value of :paramref:`key`, or :data:`~redis_asyncx.response.types.NULL`
         when :paramref:`key` does not exist.
        """
        return await self.execute_command(
            CommandName.GET, key, callback=OptionalBulkStringCallback()
        )

    @mutually_exclusive_parameters("ex", "px", "exat", "pxat", "persist")
    async def getex(
        self,
        key: KeyT,
        ex: int | datetime.timedelta | None = None,
        px: int | datetime.timedelta | None = None,
        exat: int | datetime.datetime | None = None,
        pxat: int | datetime.datetime | None = None,
        persist: bool = False,
    ) -> BulkString | Null:
        """
        Get the value of a key and optionally set its expiration

        GETEX is similar to GET, but is a write command with
        additional options. All time parameters can be given as
        :class:`datetime.timedelta` or integers.

        :param key: name of the key
        :param ex: sets an expire flag on key :paramref:`key` for ``ex`` seconds.
        :param px: sets an expire flag on key :paramref:`key` for ``px`` milliseconds.
        :param exat: sets an expire flag on key :paramref:`key` for ``ex`` seconds,
         specified in unix time.
        :param pxat: sets an expire flag on key :paramref:`key` for ``ex`` milliseconds,
         specified in unix time.
        :param persist: remove the time to live associated with :paramref:`key`.

        :return: the value of :paramref:`key`, or :data:`~redis_asyncx.response.types.NULL`
         when :paramref:`key` does not exist.
        """
        pieces: list[ValueT] = [key]

        if ex is not None:
            pieces.append(PureToken.EX)
            pieces.append(normalized_seconds(ex))

        if px is not None:
            pieces.append(PureToken.PX)
            pieces.append(normalized_milliseconds(px))

        if exat is not None:
            pieces.append(PureToken.EXAT)
            pieces.append(normalized_time_seconds(exat))

        if pxat is not None:
            pieces.append(PureToken.PXAT)
            pieces.append(normalized_time_milliseconds(pxat))

        if persist:
            pieces.append(PureToken.PERSIST)

        return await self.execute_command(
            CommandName.GETEX, *pieces, callback=OptionalBulkStringCallback()
        )

    @mutually_exclusive_parameters("ex", "px")
    @mutually_exclusive_parameters("nx", "xx")
    async def set(
        self,
        key: KeyT,
        value: ValueT,
        ex: int | datetime.timedelta | None = None,
        px: int | datetime.timedelta | None = None,
        nx: bool = False,
        xx: bool = False,
    ) -> SimpleString | Null:
        """
        Set the string value of a key

        :param nx: Only set the key if it does not already exist
        :param xx: Only set the key if it already exists
        :param ex: Number of seconds to expire in
        :param px: Number of milliseconds to expire in

        :return: ``OK`` if the value was set or :data:`~redis_asyncx.response.types.NULL`
         if the :paramref:`nx` or :paramref:`xx` condition was not met.
        """
        pieces: list[ValueT] = [key, value]

        if ex is not None:
            pieces.append(PureToken.EX)
            pieces.append(normalized_seconds(ex))

        if px is not None:
            pieces.append(PureToken.PX)
            pieces.append(normalized_milliseconds(px))

        if nx:
            pieces.append(PureToken.NX)

        if xx:
            pieces.append(PureToken.XX)

        return await self.execute_command(
            CommandName.SET, *pieces, callback=TypeCallback(SimpleString, Null)
        )

    @ensure_iterable_valid("keys")
    async def delete(self, keys: Parameters[KeyT]) -> Integer:
        """
        Delete one or more keys

        :return: The number of keys that were removed.
        """
        return await self.execute_command(CommandName.DEL, *keys, callback=IntCallback())

    del_ = delete

    @ensure_iterable_valid("keys")
    async def exists(self, keys: Parameters[KeyT]) -> Integer:
        """
        Determine if a key exists

        :return: the number of keys that exist from those specified as arguments.
        """
        return await self.execute_command(CommandName.EXISTS, *keys, callback=IntCallback())

    @ensure_integers("seconds")
    async def expire(self, key: KeyT, seconds: int) -> Integer:
        """
        Set a key's time to live in seconds

        A non positive value is sent as is; the server deletes the key
        immediately in that case.

        :return: ``1`` if the timeout was set, ``0`` if :paramref:`key` does not exist.
        """
        return await self.execute_command(
            CommandName.EXPIRE, key, seconds, callback=IntCallback()
        )

    async def ttl(self, key: KeyT) -> Integer:
        """
        Get the time to live for a key in seconds

        :return: TTL in seconds, ``-2`` if :paramref:`key` does not exist or
         ``-1`` if it exists but has no associated expire.
        """
        return await self.execute_command(CommandName.TTL, key, callback=IntCallback())

    async def incr(self, key: KeyT) -> Integer:
        """
        Increment the integer value of a key by one

        :return: the value of :paramref:`key` after the increment.
         If no key exists, the value will be initialized as 1.
        """
        return await self.execute_command(CommandName.INCR, key, callback=IntCallback())

    async def decr(self, key: KeyT) -> Integer:
        """
        Decrement the integer value of a key by one

        :return: the value of :paramref:`key` after the decrement
        """
        return await self.execute_command(CommandName.DECR, key, callback=IntCallback())

    @ensure_iterable_valid("elements")
    async def lpush(self, key: KeyT, elements: Parameters[ValueT]) -> Integer:
        """
        Prepend one or multiple elements to a list

        :return: the length of the list after the push operations.
        """
        return await self.execute_command(
            CommandName.LPUSH, key, *elements, callback=IntCallback()
        )

    @ensure_iterable_valid("elements")
    async def rpush(self, key: KeyT, elements: Parameters[ValueT]) -> Integer:
        """
        Append an element(s) to a list

        :return: the length of the list after the push operation.
        """
        return await self.execute_command(
            CommandName.RPUSH, key, *elements, callback=IntCallback()
        )

    @ensure_integers("count")
    async def lpop(self, key: KeyT, count: int | None = None) -> BulkString | Array | Null:
        """
        Remove and get the first :paramref:`count` elements in a list

        :return: the value of the first element, or :data:`~redis_asyncx.response.types.NULL`
         when :paramref:`key` does not exist. If :paramref:`count` is provided
         an :class:`Array` of the popped elements is returned instead.
        """
        return await self._pop(CommandName.LPOP, key, count)

    @ensure_integers("count")
    async def rpop(self, key: KeyT, count: int | None = None) -> BulkString | Array | Null:
        """
        Remove and get the last elements in a list

        :return: the value of the last element, or :data:`~redis_asyncx.response.types.NULL`
         when :paramref:`key` does not exist. If :paramref:`count` is provided
         an :class:`Array` of the popped elements is returned instead.
        """
        return await self._pop(CommandName.RPOP, key, count)

    @ensure_integers("start", "stop")
    async def lrange(self, key: KeyT, start: int, stop: int) -> Array:
        """
        Get a range of elements from a list

        :return: list of elements in the specified range.
        """
        return await self.execute_command(
            CommandName.LRANGE, key, start, stop, callback=ArrayCallback()
        )

    async def _pop(
        self, command: CommandName, key: KeyT, count: int | None
    ) -> BulkString | Array | Null:
        if count is None:
            return await self.execute_command(command, key, callback=OptionalBulkStringCallback())
        return await self.execute_command(
            command, key, count, callback=ArrayCallback(optional=True)
        )
