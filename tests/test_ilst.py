import struct

import pytest

from mediameta.errors import ParsingFailed
from mediameta.ilst import IlstItem, parse_ilst_box, parse_ilst_item, parse_value


def make_item(index, type_code, payload, type_set=0, local=0):
    return (
        struct.pack(">III", 24 + len(payload), index, 16 + len(payload))
        + b"data"
        + bytes([type_set])
        + type_code.to_bytes(3, "big")
        + struct.pack(">I", local)
        + payload
    )


def make_ilst(items):
    body = b"".join(items)
    return struct.pack(">I", 8 + len(body)) + b"ilst" + body


def test_text_item_matches_source_sizes():
    rem, item = parse_ilst_item(make_item(1, 1, b"Apple"))
    assert bytes(rem) == b""
    assert item == IlstItem(
        size=29, index=1, data_len=21, type_set=0, type_code=1, local=0, value="Apple"
    )


def test_unsigned_single_byte():
    _, item = parse_ilst_item(make_item(2, 22, b"\x01"))
    assert item.value == 1


def test_signed_integer_eight_bytes():
    _, item = parse_ilst_item(make_item(5, 21, (4).to_bytes(8, "big")))
    assert item.value == 4


def test_signed_integer_negative():
    assert parse_value(21, b"\xff\xfe") == -2


def test_signed_single_byte_is_unsigned():
    assert parse_value(21, b"\xff") == 255


def test_unsigned_three_bytes():
    assert parse_value(22, b"\x01\x00\x00") == 1 << 16


def test_float32_and_float64():
    assert parse_value(23, struct.pack(">f", 0.5)) == 0.5
    assert parse_value(24, struct.pack(">d", -1.25)) == -1.25


def test_invalid_int_length():
    with pytest.raises(ParsingFailed, match="data len is : 5"):
        parse_value(22, b"\x00" * 5)


def test_unsupported_type():
    with pytest.raises(ParsingFailed, match="Unsupported ilst item data type: 99"):
        parse_value(99, b"abc")


def test_short_float():
    with pytest.raises(ParsingFailed):
        parse_value(23, b"\x00\x00")


def test_invalid_utf8():
    with pytest.raises(ParsingFailed):
        parse_value(1, b"\xff\xfe")


def test_item_size_mismatch():
    raw = bytearray(make_item(1, 1, b"abc"))
    raw[8:12] = struct.pack(">I", 20)
    with pytest.raises(ParsingFailed, match="invalid ilst item"):
        parse_ilst_item(bytes(raw))


def test_item_missing_data_tag():
    raw = bytearray(make_item(1, 1, b"abc"))
    raw[12:16] = b"xxxx"
    with pytest.raises(ParsingFailed):
        parse_ilst_item(bytes(raw))


def test_item_too_short():
    with pytest.raises(ParsingFailed):
        parse_ilst_item(b"\x00" * 10)


def test_box_parses_all_items():
    items = [make_item(1, 1, b"Apple"), make_item(2, 1, b"iPhone X"), make_item(3, 22, b"\x07")]
    rem, ilst = parse_ilst_box(make_ilst(items))
    assert bytes(rem) == b""
    assert [i.index for i in ilst.items] == [1, 2, 3]
    assert [i.value for i in ilst.items] == ["Apple", "iPhone X", 7]
    assert ilst.header.box_type == "ilst"


def test_box_stops_at_invalid_item():
    bad = make_item(2, 99, b"zz")
    rem, ilst = parse_ilst_box(make_ilst([make_item(1, 1, b"ok"), bad]))
    assert [i.value for i in ilst.items] == ["ok"]
    assert bytes(rem) == bad