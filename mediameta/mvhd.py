"""The `mvhd` movie header atom (moov/mvhd)."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Tuple, Union

from mediameta.boxes import FullBoxHeader, parse_full_box
from mediameta.errors import ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]

_EPOCH_1904 = datetime(1904, 1, 1, tzinfo=timezone.utc)
_BODY_FORMAT = ">IIII76xI"
_U64_MAX = (1 << 64) - 1


@dataclass(frozen=True)
class MvhdBox:
    """Movie header; times are seconds since midnight, January 1, 1904 (UTC)."""

    header: FullBoxHeader
    creation_secs: int
    modification_secs: int
    time_scale: int
    duration: int
    next_track_id: int

    def duration_ms(self) -> int:
        """Duration of the movie in milliseconds."""
        if self.time_scale == 0:
            return 0 if self.duration == 0 else _U64_MAX
        ms = self.duration / self.time_scale * 1000.0
        if math.isinf(ms):
            return _U64_MAX
        return int(ms)

    def creation_time_utc(self) -> datetime:
        return _EPOCH_1904 + timedelta(seconds=self.creation_secs)

    def creation_time(self) -> datetime:
        """Creation time with a fixed (UTC) offset."""
        return self.creation_time_utc()

    def creation_time_local(self) -> datetime:
        return self.creation_time_utc().astimezone()


def _parse_mvhd_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, MvhdBox]:
    size = struct.calcsize(_BODY_FORMAT)
    if len(body) < size:
        raise ParsingFailed(f"not enough bytes for mvhd: need {size}, have {len(body)}")
    creation, modification, time_scale, duration, next_track_id = struct.unpack_from(
        _BODY_FORMAT, body, 0
    )
    return body[size:], MvhdBox(
        header=header,
        creation_secs=creation,
        modification_secs=modification,
        time_scale=time_scale,
        duration=duration,
        next_track_id=next_track_id,
    )


def parse_mvhd_box(data: Bytes) -> Tuple[memoryview, MvhdBox]:
    """Parse an `mvhd` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_mvhd_body)