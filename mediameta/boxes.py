"""ISO base media file format box headers and box traversal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar, Union

from mediameta.errors import Incomplete, MediaError, ParsingFailed

MAX_BODY_LEN = 2000 * 1024 * 1024

Bytes = Union[bytes, bytearray, memoryview]
T = TypeVar("T")


class UnsupportedConstructionMethod(MediaError):
    """An item uses a construction method that is not supported."""

    def __init__(self, method: int) -> None:
        self.method = method
        super().__init__(f"unsupported construction method ({method})")


def _take(view: memoryview, count: int) -> Tuple[memoryview, memoryview]:
    if len(view) < count:
        raise Incomplete(count - len(view))
    return view[count:], view[:count]


def _uint(view: memoryview, size: int) -> Tuple[memoryview, int]:
    remain, chunk = _take(view, size)
    return remain, int.from_bytes(chunk, "big")


@dataclass(frozen=True)
class BoxHeader:
    """Header of a box: total size, four-character type and header length."""

    box_size: int
    box_type: str
    header_size: int

    def body_size(self) -> int:
        return self.box_size - self.header_size


@dataclass(frozen=True)
class FullBoxHeader:
    """Header of a full box, which adds a version and 24-bit flags."""

    box_size: int
    box_type: str
    header_size: int
    version: int
    flags: int

    def body_size(self) -> int:
        return self.box_size - self.header_size


@dataclass(eq=True)
class BoxHolder:
    """A parsed box header together with the box's bytes, header included."""

    header: BoxHeader
    data: memoryview

    def __repr__(self) -> str:
        return f"BoxHolder(header={self.header!r}, data_len={len(self.data)})"

    def box_size(self) -> int:
        return self.header.box_size

    def box_type(self) -> str:
        return self.header.box_type

    def header_size(self) -> int:
        return self.header.header_size

    def body_data(self) -> memoryview:
        return self.data[self.header.header_size:]


def parse_box_header(data: Bytes) -> Tuple[memoryview, BoxHeader]:
    """Parse a box header, returning the bytes after it and the header."""
    view = memoryview(data)
    remain, size = _uint(view, 4)
    remain, raw_type = _take(remain, 4)
    # Types such as "\xa9xyz" are not valid UTF-8; map each byte to one char.
    box_type = bytes(raw_type).decode("latin-1")

    if size == 1:
        remain, box_size = _uint(remain, 8)
    elif size < 8:
        raise ParsingFailed("invalid box header: box_size is too small")
    else:
        box_size = size

    header_size = len(view) - len(remain)
    if box_size < header_size:
        raise ParsingFailed("invalid box header: box_size is smaller than its header")
    return remain, BoxHeader(box_size, box_type, header_size)


def parse_full_box_header(data: Bytes) -> Tuple[memoryview, FullBoxHeader]:
    """Parse a full box header, returning the bytes after it and the header."""
    view = memoryview(data)
    remain, header = parse_box_header(view)
    remain, version = _uint(remain, 1)
    remain, flags = _uint(remain, 3)

    header_size = len(view) - len(remain)
    if header.box_size < header_size:
        raise ParsingFailed("invalid full box header: box_size is smaller than its header")
    return remain, FullBoxHeader(
        box_size=header.box_size,
        box_type=header.box_type,
        header_size=header_size,
        version=version,
        flags=flags,
    )


def parse_box_holder(data: Bytes) -> Tuple[memoryview, BoxHolder]:
    """Parse one whole box, returning the bytes after it and the box."""
    view = memoryview(data)
    _, header = parse_box_header(view)
    remain, box_data = _take(view, header.box_size)
    return remain, BoxHolder(header, box_data)


def travel_while(
    data: Bytes, predicate: Callable[[BoxHolder], bool]
) -> Tuple[memoryview, Optional[BoxHolder]]:
    """Parse boxes while ``predicate`` holds and return the last one parsed.

    Returns ``None`` for the box when the input runs out first.
    """
    remain = memoryview(data)
    while len(remain):
        remain, bbox = parse_box_holder(remain)
        if not predicate(bbox):
            return remain, bbox
    return remain, None


def travel_header(
    data: Bytes, predicate: Callable[[BoxHeader, memoryview], bool]
) -> Tuple[memoryview, BoxHeader]:
    """Walk box headers, skipping bodies, until ``predicate`` is false.

    The predicate sees each header and the bytes following it. The returned
    bytes start at the body of the box the walk stopped at.
    """
    remain = memoryview(data)
    while True:
        remain, header = parse_box_header(remain)
        if not predicate(header, remain):
            return remain, header
        body_size = header.body_size()
        if len(remain) < body_size:
            raise Incomplete(body_size - len(remain))
        remain = remain[body_size:]


def _find_box_by_type(
    data: memoryview, box_type: str
) -> Tuple[memoryview, Optional[BoxHolder]]:
    return travel_while(data, lambda bbox: bbox.box_type() != box_type)


def find_box(data: Bytes, path: str) -> Tuple[memoryview, Optional[BoxHolder]]:
    """Find a box by a '/'-separated path of box types, e.g. "meta/iloc"."""
    view = memoryview(data)
    if not path:
        return view, None

    remain = view
    found: Optional[BoxHolder] = None
    search = view
    for box_type in (part for part in path.split("/") if part):
        rem, bbox = _find_box_by_type(search, box_type)
        if bbox is None:
            return rem, None
        search = bbox.body_data()
        remain, found = rem, bbox
    return remain, found


def parse_full_box(
    data: Bytes,
    parse_body: Callable[[memoryview, FullBoxHeader], Tuple[memoryview, T]],
) -> Tuple[memoryview, T]:
    """Parse a full box whose body is read by ``parse_body``.

    ``parse_body`` gets exactly the box body and its header and returns the
    unused part of the body together with the parsed value. The bytes after
    the whole box are returned with that value.
    """
    view = memoryview(data)
    remain, header = parse_full_box_header(view)
    body_len = header.body_size()
    if body_len > MAX_BODY_LEN:
        raise ParsingFailed(f"box {header.box_type!r} is too big: {body_len} bytes")
    remain, body = _take(remain, body_len)
    _, value = parse_body(body, header)
    return remain, value