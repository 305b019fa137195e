"""The QuickTime `ilst` item list atom (moov/meta/ilst)."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from mediameta.boxes import BoxHeader, parse_box_header
from mediameta.errors import ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]
Value = Union[str, int, float]

_ITEM_HEADER_LEN = 24
_DATA_HEADER_LEN = 16
_INT_SIZES = (1, 2, 3, 4, 8)


@dataclass(frozen=True)
class IlstItem:
    """One metadata item; ``index`` is 1-based and refers to the `keys` box."""

    size: int
    index: int
    data_len: int
    type_set: int
    type_code: int
    local: int
    value: Value


@dataclass(frozen=True)
class IlstBox:
    """An item list: a plain box header followed by its items."""

    header: BoxHeader
    items: List[IlstItem] = field(default_factory=list)


def _parse_int(data: memoryview, signed: bool) -> int:
    size = len(data)
    if size not in _INT_SIZES:
        data_type = "BE Signed Integer" if signed else "BE Unsigned Integer"
        raise ParsingFailed(
            f"Invalid ilst item data; data type is {data_type} while data len is : {size}"
        )
    # A single byte is always read unsigned.
    return int.from_bytes(data, "big", signed=signed and size > 1)


def _parse_float(data: memoryview, fmt: str) -> float:
    size = struct.calcsize(fmt)
    if len(data) < size:
        raise ParsingFailed(f"not enough bytes for float: need {size}, have {len(data)}")
    return struct.unpack_from(fmt, data, 0)[0]


def parse_value(type_code: int, data: Bytes) -> Value:
    """Decode item data according to its well-known type code."""
    view = memoryview(data)
    if type_code == 1:
        try:
            return bytes(view).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParsingFailed("invalid utf-8 in ilst item") from exc
    if type_code == 21:
        return _parse_int(view, signed=True)
    if type_code == 22:
        return _parse_int(view, signed=False)
    if type_code == 23:
        return _parse_float(view, ">f")
    if type_code == 24:
        return _parse_float(view, ">d")
    raise ParsingFailed(f"Unsupported ilst item data type: {type_code}")


def parse_ilst_item(data: Bytes) -> Tuple[memoryview, IlstItem]:
    """Parse one item, returning the bytes after it and the item."""
    view = memoryview(data)
    if len(view) < _ITEM_HEADER_LEN:
        raise ParsingFailed("not enough bytes for ilst item header")
    size, index, data_len = struct.unpack_from(">III", view, 0)
    if bytes(view[12:16]) != b"data":
        raise ParsingFailed("ilst item has no data atom")
    type_set = view[16]
    type_code = int.from_bytes(view[17:20], "big")
    (local,) = struct.unpack_from(">I", view, 20)
    remain = view[_ITEM_HEADER_LEN:]

    if size < _ITEM_HEADER_LEN or data_len < _DATA_HEADER_LEN:
        raise ParsingFailed("invalid ilst item")
    if size - _ITEM_HEADER_LEN != data_len - _DATA_HEADER_LEN:
        raise ParsingFailed("invalid ilst item")

    value_len = data_len - _DATA_HEADER_LEN
    if len(remain) < value_len:
        raise ParsingFailed("not enough bytes for ilst item value")
    value = parse_value(type_code, remain[:value_len])

    return remain[value_len:], IlstItem(
        size=size,
        index=index,
        data_len=data_len,
        type_set=type_set,
        type_code=type_code,
        local=local,
        value=value,
    )


def parse_ilst_box(data: Bytes) -> Tuple[memoryview, IlstBox]:
    """Parse an `ilst` box; item parsing stops at the first invalid item."""
    remain, header = parse_box_header(data)
    items: List[IlstItem] = []
    while True:
        try:
            remain, item = parse_ilst_item(remain)
        except ParsingFailed:
            break
        items.append(item)
    return remain, IlstBox(header, items)