"""The `idat` box: item data stored inline in a HEIF `meta` box."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from mediameta.boxes import BoxHeader, parse_box_header
from mediameta.errors import Incomplete, ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class IdatBox:
    """An `idat` box header and the item data it carries."""

    header: BoxHeader
    data: memoryview

    def get_data(self, start: int, stop: int) -> memoryview:
        """Return the item data in ``[start, stop)``."""
        if stop - start > len(self.data) or stop > len(self.data) or start > stop:
            raise ParsingFailed("idat data is too small")
        return self.data[start:stop]


def parse_idat_box(data: Bytes) -> Tuple[memoryview, IdatBox]:
    """Parse an `idat` box, returning the bytes after it and the box."""
    remain, header = parse_box_header(data)
    body_len = header.body_size()
    if len(remain) < body_len:
        raise Incomplete(body_len - len(remain))
    return remain[body_len:], IdatBox(header, remain[:body_len])