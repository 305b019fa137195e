"""EBML element headers and helpers for reading element data."""

from __future__ import annotations

import enum
import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from mediameta.errors import Incomplete, MediaError, ParsingFailed
from mediameta.vint import InvalidVInt, read_size, read_u64_with_marker

INVALID_ELEMENT_ID = 0xFF


class NotEBMLFile(ParsingFailed):
    """The data does not start with an EBML header."""


class InvalidEBMLFile(ParsingFailed):
    """The EBML data is malformed."""


class UnknownEbmlId(MediaError, ValueError):
    """An element ID is not one of the expected IDs."""

    def __init__(self, element_id: int) -> None:
        self.element_id = element_id
        super().__init__(f"unknown ebml ID: {element_id}")


class TopElementId(enum.IntEnum):
    EBML = 0x1A45DFA3
    SEGMENT = 0x18538067

    @classmethod
    def _missing_(cls, value: object) -> None:
        raise UnknownEbmlId(value)  # type: ignore[arg-type]


class EBMLHeaderId(enum.IntEnum):
    VERSION = 0x4286
    READ_VERSION = 0x42F7
    MAX_ID_LENGTH = 0x42F2
    MAX_SIZE_LENGTH = 0x42F3
    DOC_TYPE = 0x4282
    DOC_TYPE_VERSION = 0x4287
    DOC_TYPE_READ_VERSION = 0x4285
    DOC_TYPE_EXTENSION = 0x4281
    DOC_TYPE_EXTENSION_NAME = 0x4283
    DOC_TYPE_EXTENSION_VERSION = 0x4284


class EBMLGlobalId(enum.IntEnum):
    """Elements that may appear anywhere in the EBML body."""

    CRC32 = 0xBF
    VOID = 0xEC


@dataclass(frozen=True)
class ElementHeader:
    id: int
    data_size: int
    header_size: int


def _remaining(cursor: BinaryIO) -> int:
    pos = cursor.tell()
    end = cursor.seek(0, io.SEEK_END)
    cursor.seek(pos)
    return max(0, end - pos)


def _consume(cursor: BinaryIO, count: int) -> None:
    cursor.seek(count, io.SEEK_CUR)


def next_element_header(cursor: BinaryIO) -> ElementHeader:
    """Read an element ID and data size, leaving the cursor at the data."""
    pos = cursor.tell()
    try:
        element_id = read_u64_with_marker(cursor)
        data_size = read_size(cursor)
    except InvalidVInt as exc:
        cursor.seek(pos)
        raise InvalidEBMLFile(f"invalid EBML file: {exc}") from exc
    return ElementHeader(element_id, data_size, cursor.tell() - pos)


def _skip_data(cursor: BinaryIO, header: ElementHeader) -> None:
    remaining = _remaining(cursor)
    if remaining < header.data_size:
        raise Incomplete(header.data_size - remaining)
    _consume(cursor, header.data_size)


def _get_cstr(cursor: BinaryIO, size: int) -> Optional[str]:
    if _remaining(cursor) < size:
        return None
    chunk = cursor.read(size)
    return chunk.split(b"\0", 1)[0].decode("latin-1")


def _parse_ebml_head_data(data: bytes) -> str:
    cursor = io.BytesIO(data)
    while _remaining(cursor):
        header = next_element_header(cursor)
        if header.id == EBMLHeaderId.DOC_TYPE:
            doc_type = _get_cstr(cursor, header.data_size)
            if doc_type is None:
                raise Incomplete(header.data_size - _remaining(cursor))
            return doc_type
        _skip_data(cursor, header)
    raise NotEBMLFile("not an EBML file")


def parse_ebml_doc_type(cursor: BinaryIO) -> str:
    """Read the EBML header element and return its document type."""
    header = next_element_header(cursor)
    if header.id != TopElementId.EBML:
        raise NotEBMLFile("not an EBML file")

    remaining = _remaining(cursor)
    if remaining < header.data_size:
        raise Incomplete(header.data_size - remaining)

    head = cursor.read(header.data_size)
    try:
        return _parse_ebml_head_data(head)
    except Incomplete as exc:
        # The whole header is at hand, so missing bytes mean a broken file.
        raise NotEBMLFile("not an EBML file") from exc


def travel_while(
    cursor: BinaryIO, predicate: Callable[[ElementHeader], bool]
) -> ElementHeader:
    """Skip elements while ``predicate`` holds; return the first that fails it.

    The cursor is left at that element's data.
    """
    while _remaining(cursor):
        header = next_element_header(cursor)
        if not predicate(header):
            return header
        _skip_data(cursor, header)
    raise Incomplete(1)


def find_element_by_id(cursor: BinaryIO, target_id: int) -> ElementHeader:
    """Skip elements until one with ``target_id``; the cursor stays at its data."""
    return travel_while(cursor, lambda header: header.id != target_id)


def get_as_u64(cursor: BinaryIO, size: int) -> Optional[int]:
    """Read a big-endian unsigned integer of 1 to 8 bytes."""
    if _remaining(cursor) < size or not 1 <= size <= 8:
        return None
    return int.from_bytes(cursor.read(size), "big")


def get_as_f64(cursor: BinaryIO, size: int) -> Optional[float]:
    """Read a big-endian float of 4 bytes, or 5 to 8 bytes as a padded double."""
    if _remaining(cursor) < size:
        return None
    if size == 4:
        return struct.unpack(">f", cursor.read(4))[0]
    if 5 <= size <= 8:
        raw = bytes(8 - size) + cursor.read(size)
        return struct.unpack(">d", raw)[0]
    return None