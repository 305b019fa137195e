"""The `tkhd` track header atom (moov/trak/tkhd)."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from mediameta.boxes import (
    BoxHolder,
    FullBoxHeader,
    find_box,
    parse_full_box,
    travel_while,
)
from mediameta.errors import MediaError, ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]

# creation, modification, track id, reserved, duration, reserved (u64),
# layer, alternate group, volume, reserved, 36-byte matrix,
# width (integer part, fraction), height (integer part, fraction)
_BODY_FORMAT = ">IIIIIQHHHH36xHHHH"


@dataclass(frozen=True)
class TkhdBox:
    """Track header; times are seconds since midnight, January 1, 1904."""

    header: FullBoxHeader
    creation_secs: int
    modification_secs: int
    track_id: int
    duration: int
    layer: int
    alt_group: int
    volume: int
    width: int
    height: int


def _parse_tkhd_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, TkhdBox]:
    size = struct.calcsize(_BODY_FORMAT)
    if len(body) < size:
        raise ParsingFailed(f"not enough bytes for tkhd: need {size}, have {len(body)}")
    (
        creation,
        modification,
        track_id,
        _reserved,
        duration,
        _reserved2,
        layer,
        alt_group,
        volume,
        _reserved3,
        width,
        _width_fraction,
        height,
        _height_fraction,
    ) = struct.unpack_from(_BODY_FORMAT, body, 0)
    return body[size:], TkhdBox(
        header=header,
        creation_secs=creation,
        modification_secs=modification,
        track_id=track_id,
        duration=duration,
        layer=layer,
        alt_group=alt_group,
        volume=volume,
        width=width,
        height=height,
    )


def parse_tkhd_box(data: Bytes) -> Tuple[memoryview, TkhdBox]:
    """Parse a `tkhd` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_tkhd_body)


def _is_video_track(bbox: BoxHolder) -> bool:
    try:
        _, hdlr = find_box(bbox.body_data(), "mdia/hdlr")
    except MediaError:
        return False
    if hdlr is None:
        return False
    body = hdlr.body_data()
    if len(body) < 12:
        return False
    # component subtype
    return bytes(body[8:12]) == b"vide"


def _find_video_track(data: Bytes) -> Optional[BoxHolder]:
    try:
        _, bbox = travel_while(
            data, lambda b: b.box_type() != "trak" or not _is_video_track(b)
        )
    except MediaError as exc:
        raise ParsingFailed(f"find vide trak failed: {exc}") from exc
    return bbox


def parse_video_tkhd_in_moov(data: Bytes) -> Optional[TkhdBox]:
    """Find the `tkhd` of the first video track in a `moov` body."""
    track = _find_video_track(data)
    if track is None:
        return None
    _, bbox = find_box(track.body_data(), "tkhd")
    if bbox is None:
        return None
    try:
        _, tkhd = parse_tkhd_box(bbox.data)
    except MediaError as exc:
        raise ParsingFailed("parse tkhd failed") from exc
    return tkhd