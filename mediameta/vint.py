"""EBML variable-length integers."""

from __future__ import annotations

from typing import BinaryIO, Tuple, Union

from mediameta.errors import Incomplete, ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]

_MAX_LEN = 8


class InvalidVInt(ParsingFailed):
    """The bytes do not form a supported variable-length integer."""


def parse_unsigned(data: Bytes, reserve_marker: bool) -> Tuple[memoryview, int]:
    """Parse a variable-length integer, returning the bytes after it and its value.

    With ``reserve_marker`` the length marker bit is kept in the value, as
    element IDs require.
    """
    view = memoryview(data)
    if not len(view):
        raise Incomplete(1)

    first = view[0]
    length = 9 - first.bit_length()
    if length > len(view):
        raise Incomplete(length - len(view))
    if length > _MAX_LEN:
        raise InvalidVInt("invalid VInt: size > 8 is not supported")

    if not reserve_marker:
        first &= 0xFF >> length
    value = int.from_bytes(bytes([first]) + bytes(view[1:length]), "big")
    return view[length:], value


def _read(cursor: BinaryIO, reserve_marker: bool) -> int:
    pos = cursor.tell()
    window = cursor.read(_MAX_LEN + 1)
    try:
        remain, value = parse_unsigned(window, reserve_marker)
    finally:
        cursor.seek(pos)
    cursor.seek(pos + len(window) - len(remain))
    return value


def read_u64_with_marker(cursor: BinaryIO) -> int:
    """Read a variable-length integer from ``cursor``, keeping the marker bit."""
    return _read(cursor, True)


def read_size(cursor: BinaryIO) -> int:
    """Read a variable-length size from ``cursor``, without the marker bit."""
    return _read(cursor, False)