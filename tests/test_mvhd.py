import struct
from datetime import timedelta, timezone

import pytest

from mediameta.errors import ParsingFailed
from mediameta.mvhd import parse_mvhd_box


def mvhd(creation=0, modification=0, time_scale=1000, duration=0, next_track_id=2):
    body = struct.pack(">IIII", creation, modification, time_scale, duration)
    body += b"\0" * 76 + struct.pack(">I", next_track_id)
    return struct.pack(">I", 12 + len(body)) + b"mvhd" + b"\0\0\0\0" + body


def test_fields_round_trip():
    rem, box = parse_mvhd_box(mvhd(creation=11, modification=22, time_scale=600,
                                   duration=300, next_track_id=5))
    assert bytes(rem) == b""
    assert box.header.box_type == "mvhd"
    assert (box.creation_secs, box.modification_secs) == (11, 22)
    assert (box.time_scale, box.duration, box.next_track_id) == (600, 300, 5)


def test_creation_epoch_is_1904_utc():
    _, box = parse_mvhd_box(mvhd(creation=0))
    assert box.creation_time_utc().isoformat() == "1904-01-01T00:00:00+00:00"


def test_creation_time_offsets_by_seconds():
    _, box0 = parse_mvhd_box(mvhd(creation=0))
    _, box = parse_mvhd_box(mvhd(creation=3600))
    assert box.creation_time_utc() - box0.creation_time_utc() == timedelta(seconds=3600)


def test_creation_time_variants_agree():
    _, box = parse_mvhd_box(mvhd(creation=3_000_000_000))
    utc = box.creation_time_utc()
    assert box.creation_time() == utc
    assert box.creation_time().utcoffset() == timedelta(0)
    assert box.creation_time_local() == utc
    assert utc.tzinfo == timezone.utc


def test_duration_ms():
    _, box = parse_mvhd_box(mvhd(time_scale=1000, duration=1000))
    assert box.duration_ms() == 1000
    _, box = parse_mvhd_box(mvhd(time_scale=600, duration=300))
    assert box.duration_ms() == 500


def test_duration_zero_time_scale():
    _, box = parse_mvhd_box(mvhd(time_scale=0, duration=0))
    assert box.duration_ms() == 0


def test_short_body_fails():
    body = b"\0" * 20
    data = struct.pack(">I", 12 + len(body)) + b"mvhd" + b"\0\0\0\0" + body
    with pytest.raises(ParsingFailed):
        parse_mvhd_box(data)


def test_trailing_data_returned():
    rem, _ = parse_mvhd_box(mvhd() + b"tail")
    assert bytes(rem) == b"tail"