"""Protocol Buffers wire-format primitives.

Every read takes the buffer plus an explicit ``(pos, end)`` cursor and returns
the decoded value together with the new position. ``end`` is the boundary of
the enclosing message; nothing is read at or past it.
"""

from __future__ import annotations

from enum import IntEnum


class WireType(IntEnum):
    """Payload encodings that can be skipped without a schema."""

    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    FIXED32 = 5


_FIXED_WIDTHS: dict[int, int] = {
    WireType.FIXED64: 8,
    WireType.FIXED32: 4,
}


class WireFormatError(Exception):
    """Raised when a buffer is not valid wire-format data."""


class TruncatedMessageError(WireFormatError):
    """Raised when a field's payload runs past the enclosing message."""


class UnsupportedWireTypeError(WireFormatError):
    """Raised when a field uses a wire type that cannot be skipped."""

    def __init__(self, wire_type: int) -> None:
        super().__init__(f"Unsupported wire type {wire_type}")
        self.wire_type = wire_type


def read_varint(data: bytes, pos: int, end: int) -> tuple[int, int]:
    """Read a base-128 varint starting at ``pos``.

    Stops at the first byte without the continuation bit, or at ``end``.
    Truncated input yields whatever has been accumulated so far.
    """
    value = 0
    shift = 0
    while pos < end:
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
    return value, pos


def read_tag(data: bytes, pos: int, end: int) -> tuple[int, int, int]:
    """Read a field tag, returning ``(field_number, wire_type, pos)``."""
    key, pos = read_varint(data, pos, end)
    return key >> 3, key & 0x7, pos


def read_length_delimited(data: bytes, pos: int, end: int) -> tuple[int, int]:
    """Read a length prefix and return the ``[start, stop)`` range of the payload.

    The caller continues decoding at ``stop``.
    """
    length, start = read_varint(data, pos, end)
    stop = start + length
    if stop > end:
        raise TruncatedMessageError(
            f"Length-delimited field of {length} bytes at offset {start} exceeds boundary {end}"
        )
    return start, stop


def skip_field(data: bytes, pos: int, end: int, wire_type: int) -> int:
    """Advance past one field payload without interpreting it.

    Raises:
        UnsupportedWireTypeError: For group or reserved wire types.
        TruncatedMessageError: If a fixed-width payload runs past ``end``.
    """
    if wire_type == WireType.VARINT:
        _, pos = read_varint(data, pos, end)
        return pos
    if wire_type == WireType.LENGTH_DELIMITED:
        _, stop = read_length_delimited(data, pos, end)
        return stop

    width = _FIXED_WIDTHS.get(wire_type)
    if width is None:
        raise UnsupportedWireTypeError(wire_type)
    if pos + width > end:
        raise TruncatedMessageError(f"Fixed-width field at offset {pos} exceeds boundary {end}")
    return pos + width


def read_string(data: bytes, pos: int, end: int) -> tuple[str, int]:
    """Read a length-delimited UTF-8 string."""
    start, stop = read_length_delimited(data, pos, end)
    return data[start:stop].decode("utf-8", errors="replace"), stop
