import io
import struct

import pytest

from mediameta.element import (
    EBMLGlobalId,
    InvalidEBMLFile,
    NotEBMLFile,
    TopElementId,
    UnknownEbmlId,
    find_element_by_id,
    get_as_f64,
    get_as_u64,
    next_element_header,
    parse_ebml_doc_type,
    travel_while,
)
from mediameta.errors import Incomplete

EBML_ID = b"\x1a\x45\xdf\xa3"
DOC_TYPE_ID = b"\x42\x82"
DOC_TYPE_READ_VERSION_ID = b"\x42\x85"


def element(raw_id: bytes, body: bytes) -> bytes:
    return raw_id + bytes([0x80 | len(body)]) + body


def test_next_element_header():
    data = element(EBML_ID, b"abc")
    cursor = io.BytesIO(data)
    header = next_element_header(cursor)
    assert header.id == TopElementId.EBML
    assert header.data_size == 3
    assert header.header_size == len(EBML_ID) + 1
    assert cursor.read() == b"abc"


def test_next_element_header_invalid_vint():
    with pytest.raises(InvalidEBMLFile):
        next_element_header(io.BytesIO(b"\x00" * 10))


def test_doc_type():
    head = element(DOC_TYPE_READ_VERSION_ID, b"\x02") + element(DOC_TYPE_ID, b"webm")
    data = element(EBML_ID, head) + b"segment"
    cursor = io.BytesIO(data)
    assert parse_ebml_doc_type(cursor) == "webm"
    assert cursor.read() == b"segment"


def test_doc_type_stops_at_nul():
    data = element(EBML_ID, element(DOC_TYPE_ID, b"matroska\0\0"))
    assert parse_ebml_doc_type(io.BytesIO(data)) == "matroska"


def test_not_ebml_file():
    data = b"\x18\x53\x80\x67\x80"
    with pytest.raises(NotEBMLFile):
        parse_ebml_doc_type(io.BytesIO(data))


def test_ebml_header_without_doc_type():
    data = element(EBML_ID, element(DOC_TYPE_READ_VERSION_ID, b"\x02"))
    with pytest.raises(NotEBMLFile):
        parse_ebml_doc_type(io.BytesIO(data))


def test_truncated_ebml_header_needs_bytes():
    data = element(EBML_ID, element(DOC_TYPE_ID, b"webm"))
    with pytest.raises(Incomplete) as info:
        parse_ebml_doc_type(io.BytesIO(data[:-2]))
    assert info.value.needed == 2


def test_find_element_by_id():
    data = element(b"\xec", b"\0\0") + element(b"\xbf", b"\x01\x02\x03\x04")
    cursor = io.BytesIO(data)
    header = find_element_by_id(cursor, EBMLGlobalId.CRC32)
    assert header.id == EBMLGlobalId.CRC32
    assert cursor.read() == b"\x01\x02\x03\x04"


def test_find_element_missing():
    data = element(b"\xec", b"\0\0")
    with pytest.raises(Incomplete) as info:
        find_element_by_id(io.BytesIO(data), EBMLGlobalId.CRC32)
    assert info.value.needed == 1


def test_travel_while_stops_on_predicate():
    data = element(b"\xec", b"\0") + element(b"\xec", b"\0\0") + element(b"\xbf", b"")
    seen = []

    def keep_going(header):
        seen.append(header.id)
        return header.id == EBMLGlobalId.VOID

    header = travel_while(io.BytesIO(data), keep_going)
    assert header.id == EBMLGlobalId.CRC32
    assert seen == [EBMLGlobalId.VOID, EBMLGlobalId.VOID, EBMLGlobalId.CRC32]


def test_travel_while_truncated_body():
    data = element(b"\xec", b"\0\0\0")[:-2]
    with pytest.raises(Incomplete) as info:
        travel_while(io.BytesIO(data), lambda header: True)
    assert info.value.needed == 2


def test_get_as_u64():
    cursor = io.BytesIO(b"\x01\x02\x03")
    assert get_as_u64(cursor, 3) == int.from_bytes(b"\x01\x02\x03", "big")
    assert cursor.read() == b""


def test_get_as_u64_rejects_bad_sizes():
    assert get_as_u64(io.BytesIO(b"\x01"), 2) is None
    assert get_as_u64(io.BytesIO(b"\x00" * 9), 9) is None


def test_get_as_f64_double():
    cursor = io.BytesIO(struct.pack(">d", 1.5))
    assert get_as_f64(cursor, 8) == 1.5


def test_get_as_f64_single():
    cursor = io.BytesIO(struct.pack(">f", 0.5))
    assert get_as_f64(cursor, 4) == 0.5


def test_get_as_f64_bad_sizes():
    assert get_as_f64(io.BytesIO(b"\0\0\0"), 3) is None
    assert get_as_f64(io.BytesIO(b"\0\0"), 4) is None


def test_top_element_lookup():
    assert TopElementId(0x18538067) is TopElementId.SEGMENT
    with pytest.raises(UnknownEbmlId) as info:
        TopElementId(0x1234)
    assert info.value.element_id == 0x1234