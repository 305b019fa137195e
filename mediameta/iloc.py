"""The `iloc` item location box of HEIF files."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from mediameta.boxes import FullBoxHeader, parse_full_box
from mediameta.errors import Incomplete, ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]

MAX_ILOC_EXTENTS_PER_ITEM = 32


class ConstructionMethod(enum.IntEnum):
    """Where an item's extents point to."""

    FILE_OFFSET = 0
    IDAT_OFFSET = 1
    ITEM_OFFSET = 2


def _take(view: memoryview, count: int) -> Tuple[memoryview, memoryview]:
    if len(view) < count:
        raise Incomplete(count - len(view))
    return view[count:], view[:count]


def _uint(view: memoryview, size: int) -> Tuple[memoryview, int]:
    remain, chunk = _take(view, size)
    return remain, int.from_bytes(chunk, "big")


def _sized_uint(view: memoryview, size: int, message: str) -> Tuple[memoryview, int]:
    if size == 0:
        return view, 0
    if size not in (4, 8):
        raise ParsingFailed(message)
    return _uint(view, size)


@dataclass(frozen=True)
class ItemLocationExtent:
    index: int
    offset: int
    length: int


@dataclass(frozen=True)
class ItemLocation:
    """Location of one item: a base offset and its extents."""

    id: int
    construction_method: Optional[int]
    data_ref_index: int
    base_offset: int
    extents: Tuple[ItemLocationExtent, ...] = ()


@dataclass(frozen=True)
class IlocBox:
    header: FullBoxHeader
    offset_size: int
    length_size: int
    base_offset_size: int
    index_size: int
    items: Dict[int, ItemLocation] = field(default_factory=dict)

    def item_offset_len(self, item_id: int) -> Optional[Tuple[int, int, int]]:
        """Return (construction method, offset, length) of an item's first extent."""
        item = self.items.get(item_id)
        if item is None or not item.extents:
            return None
        extent = item.extents[0]
        method = item.construction_method if item.construction_method is not None else 0
        return method, item.base_offset + extent.offset, extent.length


def _parse_item(view: memoryview, version: int, sizes: Tuple[int, int, int, int]):
    offset_size, length_size, base_offset_size, index_size = sizes
    remain, item_id = _uint(view, 2 if version < 2 else 4)

    construction_method: Optional[int] = None
    if version >= 1:
        remain, raw = _uint(remain, 2)
        construction_method = raw & 0xF

    remain, data_ref_index = _uint(remain, 2)
    remain, base_offset = _sized_uint(remain, base_offset_size, "base_offset_size is not 4 or 8")
    remain, extent_count = _uint(remain, 2)
    if extent_count > MAX_ILOC_EXTENTS_PER_ITEM:
        raise ParsingFailed("extent_count > 32")

    extents = []
    for _ in range(extent_count):
        remain, index = _sized_uint(remain, index_size, "index_size is not 4 or 8")
        remain, offset = _sized_uint(remain, offset_size, "offset_size is not 4 or 8")
        remain, length = _sized_uint(remain, length_size, "length_size is not 4 or 8")
        extents.append(ItemLocationExtent(index, offset, length))

    return remain, ItemLocation(
        id=item_id,
        construction_method=construction_method,
        data_ref_index=data_ref_index,
        base_offset=base_offset,
        extents=tuple(extents),
    )


def _parse_iloc_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, IlocBox]:
    version = header.version
    remain, packed = _uint(body, 1)
    offset_size, length_size = packed >> 4, packed & 0xF
    remain, packed = _uint(remain, 1)
    base_offset_size, index_size = packed >> 4, packed & 0xF
    remain, item_count = _uint(remain, 2 if version < 2 else 4)

    sizes = (offset_size, length_size, base_offset_size, index_size)
    items: Dict[int, ItemLocation] = {}
    for _ in range(item_count):
        remain, item = _parse_item(remain, version, sizes)
        items[item.id] = item

    return remain, IlocBox(
        header=header,
        offset_size=offset_size,
        length_size=length_size,
        base_offset_size=base_offset_size,
        index_size=index_size,
        items=items,
    )


def parse_iloc_box(data: Bytes) -> Tuple[memoryview, IlocBox]:
    """Parse an `iloc` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_iloc_body)