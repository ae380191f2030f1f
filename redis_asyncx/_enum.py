from __future__ import annotations

import enum


@enum.unique
class CaseAndEncodingInsensitiveEnum(bytes, enum.Enum):
    """
    Base class for protocol tokens (command names and keywords).

    Redis treats tokens case insensitively, so members compare equal to
    any casing of their value given either as :class:`bytes` or :class:`str`::

        >>> CommandName.GET == "get"
        True
    """

    @staticmethod
    def _folded(value: object) -> bytes | None:
        if isinstance(value, str):
            return value.upper().encode("latin-1", "replace")
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).upper()
        return None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CaseAndEncodingInsensitiveEnum):
            return bytes(self.value) == bytes(other.value)
        return self._folded(other) == self.value.upper()

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __str__(self) -> str:
        return self.value.decode("latin-1")

    def __hash__(self) -> int:
        return hash(self.value)
