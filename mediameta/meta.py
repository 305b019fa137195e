"""The `meta` box of HEIF/HEIC files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from mediameta.boxes import BoxHolder, FullBoxHeader, parse_box_holder, parse_full_box
from mediameta.errors import Incomplete, ParsingFailed
from mediameta.iinf import IinfBox, parse_iinf_box
from mediameta.iloc import ConstructionMethod, IlocBox, parse_iloc_box

Bytes = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class MetaBox:
    """A `meta` box with its item information and item location boxes."""

    header: FullBoxHeader
    iinf: Optional[IinfBox] = None
    iloc: Optional[IlocBox] = None

    def __repr__(self) -> str:
        iinf_num = len(self.iinf.entries) if self.iinf is not None else None
        iloc_num = len(self.iloc.items) if self.iloc is not None else None
        return (
            f"MetaBox(header={self.header!r}, iinf_entries={iinf_num}, "
            f"iloc_items={iloc_num})"
        )

    def _exif_location(self) -> Optional[Tuple[int, int, int]]:
        if self.iinf is None or self.iloc is None:
            return None
        infe = self.iinf.get_infe("Exif")
        if infe is None:
            return None
        return self.iloc.item_offset_len(infe.id)

    def exif_data(self, data: Bytes) -> Tuple[memoryview, Optional[memoryview]]:
        """Cut the Exif item out of the whole file ``data``.

        Returns the bytes after the item and the item, or ``data`` and
        ``None`` when there is no Exif item.
        """
        view = memoryview(data)
        location = self._exif_location()
        if location is None:
            return view, None
        method, offset, length = location
        if method != ConstructionMethod.FILE_OFFSET:
            raise ParsingFailed(f"construction method {method} is not supported yet")
        start, end = offset, offset + length
        if end > len(view):
            raise Incomplete(end - len(view))
        return view[end:], view[start:end]

    def exif_data_offset(self) -> Optional[range]:
        """The file range holding the Exif item, if it is stored by file offset."""
        location = self._exif_location()
        if location is None:
            return None
        method, offset, length = location
        if method != ConstructionMethod.FILE_OFFSET:
            return None
        return range(offset, offset + length)


def _parse_meta_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, MetaBox]:
    remain = body
    boxes: Dict[str, BoxHolder] = {}
    while len(remain):
        try:
            rem, bbox = parse_box_holder(remain)
        except ParsingFailed:
            break
        remain = rem
        boxes[bbox.box_type()] = bbox

    iinf = parse_iinf_box(boxes["iinf"].data)[1] if "iinf" in boxes else None
    iloc = parse_iloc_box(boxes["iloc"].data)[1] if "iloc" in boxes else None
    return remain, MetaBox(header, iinf, iloc)


def parse_meta_box(data: Bytes) -> Tuple[memoryview, MetaBox]:
    """Parse a `meta` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_meta_body)