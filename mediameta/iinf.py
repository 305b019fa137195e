"""The `iinf` item information box and its `infe` entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from mediameta.boxes import FullBoxHeader, parse_full_box
from mediameta.errors import Incomplete, ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]


def _take(view: memoryview, count: int) -> Tuple[memoryview, memoryview]:
    if len(view) < count:
        raise Incomplete(count - len(view))
    return view[count:], view[:count]


def _uint(view: memoryview, size: int) -> Tuple[memoryview, int]:
    remain, chunk = _take(view, size)
    return remain, int.from_bytes(chunk, "big")


def _utf8(raw: memoryview, what: str) -> str:
    try:
        return bytes(raw).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParsingFailed(f"invalid utf-8 in {what}") from exc


def _parse_cstr(view: memoryview) -> Tuple[memoryview, str]:
    end = bytes(view).find(b"\0")
    if end < 0:
        raise Incomplete(1)
    return view[end + 1:], _utf8(view[:end], "string")


@dataclass(frozen=True)
class InfeBox:
    """An item information entry."""

    header: FullBoxHeader
    id: int
    protection_index: int
    item_type: Optional[str]
    item_name: str
    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    uri_type: Optional[str] = None

    def key(self) -> str:
        """The item type, or the item name when there is no type."""
        return self.item_type if self.item_type is not None else self.item_name


def _parse_infe_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, InfeBox]:
    version = header.version
    remain, item_id = _uint(body, 4 if version > 2 else 2)
    remain, protection_index = _uint(remain, 2)

    item_type: Optional[str] = None
    if version >= 2:
        remain, raw_type = _take(remain, 4)
        item_type = _utf8(raw_type, "infe item type")

    try:
        remain, item_name = _parse_cstr(remain)
    except Incomplete as exc:
        raise ParsingFailed("no enough bytes for infe item name") from exc

    content_type: Optional[str] = None
    content_encoding: Optional[str] = None
    if version <= 1 or item_type == "mime":
        remain, content_type = _parse_cstr(remain)
        if len(remain):
            remain, content_encoding = _parse_cstr(remain)

    uri_type: Optional[str] = None
    if version >= 2 and item_type == "uri":
        remain, uri_type = _parse_cstr(remain)

    return remain, InfeBox(
        header=header,
        id=item_id,
        protection_index=protection_index,
        item_type=item_type,
        item_name=item_name,
        content_type=content_type,
        content_encoding=content_encoding,
        uri_type=uri_type,
    )


def parse_infe_box(data: Bytes) -> Tuple[memoryview, InfeBox]:
    """Parse an `infe` box, returning the bytes after it and the entry."""
    return parse_full_box(data, _parse_infe_body)


@dataclass(frozen=True)
class IinfBox:
    """Item information: entries keyed by item type (or name)."""

    header: FullBoxHeader
    entries: Dict[str, InfeBox] = field(default_factory=dict)

    def get_infe(self, item_type: str) -> Optional[InfeBox]:
        return self.entries.get(item_type)


def _parse_iinf_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, IinfBox]:
    remain, item_count = _uint(body, 4 if header.version > 0 else 2)
    entries: Dict[str, InfeBox] = {}
    for _ in range(item_count):
        remain, infe = parse_infe_box(remain)
        entries[infe.key()] = infe
    return remain, IinfBox(header, entries)


def parse_iinf_box(data: Bytes) -> Tuple[memoryview, IinfBox]:
    """Parse an `iinf` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_iinf_body)