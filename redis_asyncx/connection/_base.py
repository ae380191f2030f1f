from __future__ import annotations

import dataclasses
import enum
import functools
from abc import ABC, abstractmethod
from collections import deque
from typing import cast

from anyio import (
    BrokenResourceError,
    BusyResourceError,
    CancelScope,
    ClosedResourceError,
    EndOfStream,
    get_cancelled_exc_class,
    move_on_after,
)
from anyio.abc import ByteStream

from redis_asyncx._packer import Packer
from redis_asyncx._utils import logger, nativestr
from redis_asyncx.commands.constants import CommandName
from redis_asyncx.config import Config
from redis_asyncx.constants import PROTOCOL_VERSIONS, DataType
from redis_asyncx.exceptions import (
    ConnectionClosedError,
    ConnectionError,
    InvalidResponse,
    NegotiationError,
    ProtocolError,
    TimeoutError,
)
from redis_asyncx.parser import NotEnoughData, Parser
from redis_asyncx.response._callbacks import HelloCallback, parse_error
from redis_asyncx.response.types import Array, Error, Map, Push, Value
from redis_asyncx.typing import (
    Awaitable,
    Callable,
    NotRequired,
    ProtocolVersion,
    Self,
    TypedDict,
    TypeVar,
    ValueT,
)

R = TypeVar("R")


@dataclasses.dataclass(unsafe_hash=True)
class Location:
    """
    Abstract location
    """

    ...


class ConnectionState(enum.Enum):
    #: The transport has not been established yet
    CONNECTING = "connecting"
    #: The transport is established and commands can be executed
    READY = "ready"
    #: The transport was released (explicitly or due to an unrecoverable error)
    CLOSED = "closed"


class BaseConnectionParams(TypedDict):
    """
    The common parameters accepted by :class:`redis_asyncx.connection.BaseConnection`
    """

    #: Maximum time to wait for receiving a response
    #: for commands executed through this connection.
    stream_timeout: NotRequired[float | None]
    #: Maximum time to wait for establishing a connection
    connect_timeout: NotRequired[float | None]
    #: Encoding used for :class:`str` arguments and textual replies
    encoding: NotRequired[str]
    #: Number of unsolicited push messages retained in
    #: :attr:`~redis_asyncx.connection.BaseConnection.push_messages`
    max_push_messages: NotRequired[int]


class BaseConnection(ABC):
    """
    Base class for Redis connections.

    Manages a low-level connection to a single Redis server: sending a
    command, receiving and decoding its reply, switching the protocol
    version with ``HELLO`` and connection lifecycle management.

    Only one command can be in flight at a time. Concurrent callers must
    either serialize their access or use separate connections.

    Subclasses must implement the :meth:`_connect` method to establish the
    underlying transport (TCP, UNIX socket, etc.).
    """

    Params = BaseConnectionParams
    """
    :meta private:
    """

    @staticmethod
    def _ensure_usable(
        function: Callable[..., Awaitable[R]],
    ) -> Callable[..., Awaitable[R]]:
        @functools.wraps(function)
        def _connection_ensured(slf: BaseConnection, /, *args: object, **kwargs: object) -> Awaitable[R]:
            if slf.state == ConnectionState.READY:
                return function(slf, *args, **kwargs)
            if slf.state == ConnectionState.CLOSED:
                raise ConnectionClosedError("Connection closed") from slf._last_error
            raise ConnectionError("Connection not established")

        _connection_ensured.__doc__ = f"""{_connection_ensured.__doc__}
:raises: :exc:`redis_asyncx.exceptions.ConnectionClosedError` if the connection
 has been closed.
"""
        return _connection_ensured

    def __init__(
        self,
        location: Location,
        *,
        stream_timeout: float | None = None,
        connect_timeout: float | None = None,
        encoding: str = "utf-8",
        max_push_messages: int = 1024,
    ):
        """
        :param location: The location of the server this connection is connecting to
        :param stream_timeout: Maximum time to wait for receiving a response
         for commands executed through this connection.
        :param connect_timeout: Maximum time to wait for establishing a connection
        :param encoding: Encoding used for :class:`str` arguments and textual replies.
        :param max_push_messages: Number of unsolicited push messages to retain.
        """
        self.location = location

        self._stream_timeout = stream_timeout
        self._connect_timeout = connect_timeout
        self._encoding = encoding

        self.state = ConnectionState.CONNECTING
        #: The protocol version negotiated with the server. Connections
        #: always start with RESP2 and can only be switched with :meth:`negotiate`
        self.protocol_version: ProtocolVersion = 2
        # The actual connection to the server
        self.stream: ByteStream | None = None
        #: Push messages that arrived while waiting for the reply to a command.
        #: They are not related to any command and are retained here instead
        #: of being discarded.
        self.push_messages: deque[Push] = deque(maxlen=max_push_messages)

        # RESP parser/packer
        self._parser = Parser(self.protocol_version, encoding)
        self._packer: Packer = Packer(self._encoding)

        self._awaiting_reply = False
        self._last_error: BaseException | None = None

    def __repr__(self) -> str:
        return self.describe()

    @abstractmethod
    def describe(self) -> str: ...

    @abstractmethod
    async def _connect(self) -> ByteStream:
        """
        Establish and return the underlying transport connection to the Redis server.
        """
        ...

    @property
    def is_connected(self) -> bool:
        """
        Whether the transport is established and commands can be executed
        """
        return self.state == ConnectionState.READY

    async def connect(self) -> Self:
        """
        Establish the transport to the redis server. The connection
        starts out speaking RESP2.

        .. note:: This method can only be called once for a :class:`~redis_asyncx.connection.BaseConnection`
           instance. Once the connection closes either due to cancellation or errors it should be
           discarded.

        :raises: :exc:`~redis_asyncx.exceptions.ConnectionError` if the transport
         could not be established
        """
        if self.state != ConnectionState.CONNECTING or self.stream is not None:
            raise RuntimeError("Connection cannot be reused")
        try:
            self.stream = await self._connect()
        except Exception as connection_error:
            self._last_error = connection_error
            self.state = ConnectionState.CLOSED
            # Wrap any errors with a ConnectionError so that callers can
            # handle them explicitly as being part of connection creation.
            raise ConnectionError(
                f"Unable to establish a connection to {self.describe()}"
            ) from connection_error
        self.state = ConnectionState.READY
        logger.debug("Connected to %s", self.describe())
        return self

    async def __aenter__(self) -> Self:
        if self.state == ConnectionState.CONNECTING:
            await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """
        Release the transport. Calling this on an already closed connection
        is a no-op and any subsequent :meth:`execute` will raise
        :exc:`~redis_asyncx.exceptions.ConnectionClosedError`
        """
        if self.state == ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSED
        self._parser.on_disconnect()
        if self.stream is not None:
            stream, self.stream = self.stream, None
            with CancelScope(shield=True):
                await stream.aclose()
            logger.debug("Closed connection to %s", self.describe())

    close = aclose

    async def _terminate(self, error: BaseException) -> None:
        """
        Close the connection due to an error that leaves it unusable
        (transport failure, malformed data or an abandoned command).
        """
        self._last_error = error
        if self.state == ConnectionState.READY:
            logger.info("Connection to %s closed unexpectedly: %s", self.describe(), error)
        await self.aclose()

    @_ensure_usable
    async def execute(self, command: bytes, *args: ValueT) -> Value:
        """
        Send a command to the server and wait for its reply.

        Error replies sent by the server are returned as
        :class:`~redis_asyncx.response.types.Error` values and do not affect
        the connection.

        :raises: :exc:`~redis_asyncx.exceptions.ConnectionError` if the transport failed,
         :exc:`~redis_asyncx.exceptions.ProtocolError` if the reply could not be decoded
         or :exc:`~redis_asyncx.exceptions.TimeoutError` if no reply was received within
         the stream timeout. In all three cases the connection is closed.
        :raises: :exc:`anyio.BusyResourceError` if another command is already
         awaiting its reply on this connection.
        """
        if self._awaiting_reply:
            raise BusyResourceError("executing a command")
        self._awaiting_reply = True
        name = nativestr(command)
        try:
            stale = self._check_unsolicited()
            with move_on_after(self._stream_timeout):
                await self._send(self._packer.pack_command(command, *args))
                return await self._read_reply(name, stale)
            # only reachable if the timeout expired
            timeout = TimeoutError(f"{name} timed out after {self._stream_timeout} seconds")
            await self._terminate(timeout)
            raise timeout
        except get_cancelled_exc_class():
            await self._terminate(ConnectionError(f"{name} was cancelled"))
            raise
        except ConnectionError as err:
            await self._terminate(err)
            raise
        finally:
            self._awaiting_reply = False

    @_ensure_usable
    async def negotiate(self, protocol_version: int) -> Map | Array:
        """
        Switch the protocol version of the connection using ``HELLO``.

        :return: The server's confirmation (a map under RESP3, a flat
         array under RESP2)
        :raises: :exc:`~redis_asyncx.exceptions.NegotiationError` if the
         server rejected the switch or did not confirm it. The protocol version
         is left unchanged in that case.
        """
        if protocol_version not in PROTOCOL_VERSIONS:
            raise NegotiationError(f"Unsupported protocol version {protocol_version}")
        previous = self.protocol_version
        # The confirmation is already sent using the requested version
        self._parser.protocol_version = cast(ProtocolVersion, protocol_version)
        try:
            response = await self.execute(CommandName.HELLO, protocol_version)
        finally:
            self._parser.protocol_version = previous
        if isinstance(response, Error):
            raise NegotiationError(
                f"Server rejected HELLO {protocol_version}: {response}"
            ) from parse_error(response)
        if (
            not isinstance(response, (Map, Array))
            or HelloCallback.protocol(response) != protocol_version
        ):
            raise NegotiationError(f"Malformed HELLO {protocol_version} confirmation: {response!r}")
        self.protocol_version = self._parser.protocol_version = cast(
            ProtocolVersion, protocol_version
        )
        logger.debug("Switched %s to RESP%d", self.describe(), protocol_version)
        return response

    def _check_unsolicited(self) -> bool:
        """
        Before sending a command make sure the server has not sent anything
        that could be mistaken for its reply.

        :return: Whether the beginning of a frame is still buffered. That
         frame was started before the command was sent.
        """
        while self._parser.can_read():
            response = self._parser.parse()
            if isinstance(response, NotEnoughData):
                break
            if response.response_type == DataType.PUSH:
                self._push_received(cast(Push, response.response))
                continue
            raise ProtocolError(f"Unsolicited response received: {response.response!r}")
        return self._parser.has_partial_frame()

    async def _send(self, chunks: list[bytes]) -> None:
        assert self.stream
        try:
            await self.stream.send(b"".join(chunks))
        except (ClosedResourceError, BrokenResourceError, OSError) as err:
            raise ConnectionError("Connection lost while sending request") from err

    async def _receive(self) -> bytes:
        assert self.stream
        try:
            return await self.stream.receive()
        except EndOfStream as err:
            if self._parser.has_partial_frame():
                raise ProtocolError("Connection closed while receiving a partial response") from err
            raise ConnectionError("Connection closed by server") from err
        except (ClosedResourceError, BrokenResourceError, OSError) as err:
            raise ConnectionError("Connection lost while receiving response") from err

    async def _read_reply(self, command: str, stale: bool = False) -> Value:
        while True:
            response = self._parser.parse()
            if isinstance(response, NotEnoughData):
                self._parser.write(await self._receive())
                continue
            if response.response_type == DataType.PUSH:
                self._push_received(cast(Push, response.response))
                stale = False
                continue
            if stale:
                raise ProtocolError(f"Unsolicited response received: {response.response!r}")
            if not response.conformant:
                self._nonconformant(command, response.response)
            return response.response

    def _push_received(self, message: Push) -> None:
        logger.warning("Push message received on %s while awaiting a reply: %r", self.describe(), message)
        self.push_messages.append(message)

    def _nonconformant(self, command: str, response: Value) -> None:
        reason = f"Reply to {command} does not conform to RESP{self.protocol_version}: {response!r}"
        if Config.strict_protocol:
            raise InvalidResponse(reason)
        logger.warning(reason)
