from __future__ import annotations

import re
from io import BytesIO

from redis_asyncx.constants import (
    AGGREGATES,
    RESP3_ONLY,
    SYM_CRLF,
    SYM_FALSE,
    SYM_LF,
    SYM_TRUE,
    DataType,
)
from redis_asyncx.exceptions import ProtocolError
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
    Push,
    Set,
    SimpleString,
    Value,
    VerbatimString,
)
from redis_asyncx.typing import Final, NamedTuple, ProtocolVersion


class NotEnoughData:
    pass


NOT_ENOUGH_DATA: Final[NotEnoughData] = NotEnoughData()

#: Integers, lengths and counts: an optional minus sign and ascii digits
NUMBER: Final = re.compile(rb"-?[0-9]+")


class RESPNode:
    """
    An aggregate whose children have not all been received yet.
    ``depth`` is the number of children still expected.
    """

    __slots__ = ("depth", "items", "node_type")
    depth: int
    node_type: int

    def __init__(self, depth: int, node_type: int) -> None:
        self.depth = depth
        self.node_type = node_type
        self.items: list[Value] = []

    def append(self, item: Value) -> None:
        self.depth -= 1
        self.items.append(item)

    def build(self) -> Value:
        if self.node_type == DataType.MAP:
            return Map(tuple(zip(self.items[::2], self.items[1::2])))
        elif self.node_type == DataType.SET:
            return Set(tuple(self.items))
        elif self.node_type == DataType.PUSH:
            return Push(tuple(self.items))
        return Array(tuple(self.items))


class UnpackedResponse(NamedTuple):
    #: The marker of the outermost type of the response
    response_type: int
    response: Value
    #: ``False`` if the response used a data type that does not
    #: belong to the protocol version the parser was configured with
    conformant: bool


class Parser:
    """
    Incremental RESP2/RESP3 decoder.

    Bytes are accumulated with :meth:`write` (or :meth:`feed`) and complete
    values are extracted as soon as enough data is available. Partially
    received aggregates are tracked on an explicit stack of
    :class:`RESPNode` instances so that decoding can resume at any byte
    boundary.
    """

    def __init__(self, protocol_version: ProtocolVersion = 2, encoding: str = "utf-8") -> None:
        #: The negotiated protocol version. Only used to flag replies that
        #: use data types of the other protocol generation, decoding itself
        #: is driven by the (self describing) type markers.
        self.protocol_version: ProtocolVersion = protocol_version
        self.encoding = encoding
        self.localbuffer: BytesIO = BytesIO(b"")
        self.bytes_read: int = 0
        self.bytes_written: int = 0
        self.nodes: list[RESPNode] = []
        self._conformant = True

    def write(self, data: bytes) -> None:
        self.localbuffer.seek(self.bytes_written)
        self.bytes_written += self.localbuffer.write(data)
        self.localbuffer.seek(self.bytes_read)

    def feed(self, data: bytes) -> list[Value]:
        """
        Append :paramref:`data` to the buffer and return all values that
        could be completed (which may be none). Bytes belonging to an
        incomplete trailing value remain buffered for the next call.

        :raises: :exc:`~redis_asyncx.exceptions.ProtocolError` if the data is malformed
        """
        self.write(data)
        responses: list[Value] = []
        while not isinstance(response := self.parse(), NotEnoughData):
            responses.append(response.response)
        return responses

    def on_disconnect(self) -> None:
        """Called when the stream disconnects"""
        if not self.localbuffer.closed:
            self.localbuffer.seek(0)
            self.localbuffer.truncate()
            self.bytes_read = self.bytes_written = 0
        self.nodes.clear()
        self._conformant = True

    def can_read(self) -> bool:
        return (self.bytes_written - self.bytes_read) > 0

    def has_partial_frame(self) -> bool:
        """Whether any bytes of a value that is not yet complete have been received"""
        return bool(self.nodes) or self.can_read()

    def parse(self) -> UnpackedResponse | NotEnoughData:
        """
        :return: The next complete response in the buffer or
         :data:`NOT_ENOUGH_DATA` if more data is needed.
        """
        self.localbuffer.seek(self.bytes_read)

        while True:
            data = self.localbuffer.readline()
            if not data[-2::] == SYM_CRLF:
                if data[-1::] == SYM_LF:
                    raise ProtocolError(f"Protocol Error: line not terminated by CRLF {data!r}")
                return NOT_ENOUGH_DATA
            data_len = len(data)
            self.bytes_read += data_len
            marker, chunk = data[0], data[1:-2]
            if self.protocol_version == 2 and marker in RESP3_ONLY:
                self._conformant = False
            response: Value
            if marker == DataType.SIMPLE_STRING:
                response = SimpleString(chunk.decode(self.encoding, "replace"))
            elif marker == DataType.ERROR:
                response = Error.from_text(chunk.decode(self.encoding, "replace"))
            elif marker == DataType.INT:
                response = Integer(self._integer(marker, chunk))
            elif marker in {DataType.BULK_STRING, DataType.VERBATIM, DataType.BLOB_ERROR}:
                length = self._integer(marker, chunk)
                if length < 0:
                    if marker == DataType.BULK_STRING and self.protocol_version == 3:
                        self._conformant = False
                    response = NULL
                else:
                    if (self.bytes_written - self.bytes_read) < length + 2:
                        self.bytes_read -= data_len
                        return NOT_ENOUGH_DATA
                    data = self.localbuffer.read(length + 2)
                    self.bytes_read += length + 2
                    if data[-2:] != SYM_CRLF:
                        raise ProtocolError(
                            f"Protocol Error: payload of {chr(marker)}{length} not terminated by CRLF"
                        )
                    payload = data[:-2]
                    if marker == DataType.BULK_STRING:
                        response = BulkString(payload)
                    elif marker == DataType.BLOB_ERROR:
                        response = Error.from_text(payload.decode(self.encoding, "replace"))
                    else:
                        response = self._verbatim(payload)
            elif marker == DataType.NONE:
                response = NULL
            elif marker == DataType.BOOLEAN:
                if chunk not in (SYM_TRUE, SYM_FALSE):
                    raise ProtocolError(f"Protocol Error: invalid boolean {chunk!r}")
                response = Boolean(chunk == SYM_TRUE)
            elif marker == DataType.DOUBLE:
                try:
                    response = Double(float(chunk.decode("ascii")))
                except (UnicodeDecodeError, ValueError) as err:
                    raise ProtocolError(f"Protocol Error: invalid double {chunk!r}") from err
            elif marker == DataType.BIGNUMBER:
                self._integer(marker, chunk)
                response = BigNumber(chunk.decode("ascii"))
            elif marker in AGGREGATES:
                length = self._integer(marker, chunk)
                if length < 0:
                    if marker == DataType.ARRAY and self.protocol_version == 3:
                        self._conformant = False
                    response = NULL
                else:
                    node = RESPNode(length * 2 if marker == DataType.MAP else length, marker)
                    if length > 0:
                        self.nodes.append(node)
                        continue
                    response = node.build()
            else:
                raise ProtocolError(f"Protocol Error: {chr(marker)}, {bytes(chunk)!r}")

            response_type = marker
            while self.nodes:
                self.nodes[-1].append(response)
                if self.nodes[-1].depth > 0:
                    break
                node = self.nodes.pop()
                response, response_type = node.build(), node.node_type
            if self.nodes:
                continue

            parsed = UnpackedResponse(response_type, response, self._conformant)
            self._conformant = True
            break

        if self.bytes_read == self.bytes_written:
            self.localbuffer.seek(0)
            self.localbuffer.truncate()
            self.bytes_read = self.bytes_written = 0
        return parsed

    def _integer(self, marker: int, chunk: bytes) -> int:
        if NUMBER.fullmatch(chunk) is None:
            raise ProtocolError(f"Protocol Error: {chr(marker)}, invalid number {bytes(chunk)!r}")
        return int(chunk)

    def _verbatim(self, payload: bytes) -> VerbatimString:
        if len(payload) < 4 or payload[3:4] != b":":
            raise ProtocolError(f"Protocol Error: malformed verbatim string {payload[:4]!r}")
        return VerbatimString(
            payload[:3].decode("ascii", "replace"),
            payload[4:].decode(self.encoding, "replace"),
        )
