from __future__ import annotations

from redis_asyncx.constants import SYM_CRLF, SYM_DOLLAR, SYM_EMPTY, SYM_STAR
from redis_asyncx.typing import Iterable, ValueT

#: Arguments larger than this are emitted as separate chunks instead of
#: being copied into the request buffer
CHUNK_THRESHOLD = 6000


class Packer:
    """
    Encodes commands as RESP arrays of bulk strings. Requests use the
    same form regardless of the negotiated protocol version.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def encode(self, value: ValueT) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, str):
            return value.encode(self.encoding)
        if isinstance(value, int):
            return b"%d" % value
        if isinstance(value, float):
            return b"%.15g" % value
        raise TypeError(f"Invalid argument {value!r} of type {type(value).__name__}")

    def pack_command(self, command: bytes, *args: ValueT) -> list[bytes]:
        """
        :param command: The command name. Multi word names (``b"CONFIG GET"``)
         are sent as separate arguments.
        :return: The request split into chunks that can be written in order
        """
        arguments = [*command.split(), *(self.encode(arg) for arg in args)]
        chunks: list[bytes] = []
        pending = [SYM_STAR, b"%d" % len(arguments), SYM_CRLF]
        for argument in arguments:
            pending.extend((SYM_DOLLAR, b"%d" % len(argument), SYM_CRLF))
            if len(argument) > CHUNK_THRESHOLD:
                chunks.extend((SYM_EMPTY.join(pending), argument))
                pending = [SYM_CRLF]
            else:
                pending.extend((argument, SYM_CRLF))
        chunks.append(SYM_EMPTY.join(pending))
        return chunks


def encode(args: Iterable[ValueT], encoding: str = "utf-8") -> bytes:
    """
    Serialize a command (the command name followed by its arguments) into
    the RESP array of bulk strings form accepted by servers speaking either
    protocol version::

        >>> encode([b"SET", "key", 1])
        b'*3\\r\\n$3\\r\\nSET\\r\\n$3\\r\\nkey\\r\\n$1\\r\\n1\\r\\n'
    """
    packer = Packer(encoding)
    command, *rest = args
    return SYM_EMPTY.join(packer.pack_command(packer.encode(command), *rest))
