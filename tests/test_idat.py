import struct

import pytest

from mediameta.errors import Incomplete, ParsingFailed
from mediameta.idat import parse_idat_box


def make_box(box_type: bytes, body: bytes) -> bytes:
    return struct.pack(">I", 8 + len(body)) + box_type + body


def test_parse_idat_box_returns_body_and_remain():
    raw = make_box(b"idat", b"hello") + b"tail"
    remain, idat = parse_idat_box(raw)
    assert bytes(remain) == b"tail"
    assert bytes(idat.data) == b"hello"
    assert idat.header.box_type == "idat"
    assert idat.header.header_size == 8


def test_get_data_slices_range():
    _, idat = parse_idat_box(make_box(b"idat", b"hello"))
    assert bytes(idat.get_data(1, 3)) == b"el"
    assert bytes(idat.get_data(0, 5)) == b"hello"


def test_get_data_too_large_range_fails():
    _, idat = parse_idat_box(make_box(b"idat", b"hello"))
    with pytest.raises(ParsingFailed, match="idat data is too small"):
        idat.get_data(0, 10)


def test_get_data_out_of_bounds_fails():
    _, idat = parse_idat_box(make_box(b"idat", b"hello"))
    with pytest.raises(ParsingFailed):
        idat.get_data(4, 6)


def test_truncated_body_is_incomplete():
    full = make_box(b"idat", b"hello")
    truncated = full[:-3]
    with pytest.raises(Incomplete) as excinfo:
        parse_idat_box(truncated)
    assert excinfo.value.needed == len(full) - len(truncated)