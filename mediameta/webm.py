"""Metadata of EBML based files such as `.webm` and `.mkv`."""

from __future__ import annotations

import enum
import io
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Dict, Optional, Type, TypeVar, Union

from mediameta.element import (
    INVALID_ELEMENT_ID,
    EBMLGlobalId,
    TopElementId,
    get_as_f64,
    get_as_u64,
    next_element_header,
    parse_ebml_doc_type,
    travel_while,
    find_element_by_id,
)
from mediameta.errors import Incomplete, MediaError, ParsingFailed
from mediameta.vint import read_size, read_u64_with_marker

Bytes = Union[bytes, bytearray, memoryview]
E = TypeVar("E", bound=enum.IntEnum)

_EPOCH_2001 = datetime(2001, 1, 1, tzinfo=timezone.utc)
_DEFAULT_TIME_SCALE = 1_000_000
_U32_MASK = 0xFFFFFFFF
_U64_MAX = (1 << 64) - 1


class NotWebmFile(ParsingFailed):
    """The EBML data is not a WebM/Matroska file."""


class InvalidSeekEntry(ParsingFailed):
    """A SeekHead entry is malformed."""


class SegmentId(enum.IntEnum):
    SEEK_HEAD = 0x114D9B74
    INFO = 0x1549A966
    TRACKS = 0x1654AE6B
    CLUSTER = 0x1F43B675
    CUES = 0x1C53BB6B


class InfoId(enum.IntEnum):
    TIMESTAMP_SCALE = 0x2AD7B1
    DURATION = 0x4489
    DATE = 0x4461


class TracksId(enum.IntEnum):
    TRACK_ENTRY = 0xAE
    TRACK_TYPE = 0x83
    VIDEO_TRACK = 0xE0
    PIXEL_WIDTH = 0xB0
    PIXEL_HEIGHT = 0xBA


class SeekHeadId(enum.IntEnum):
    SEEK = 0x4DBB
    SEEK_ID = 0x53AB
    SEEK_POSITION = 0x53AC


def _lookup(enum_cls: Type[E], value: int) -> Optional[E]:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _id_name(element_id: int) -> str:
    for enum_cls in (TopElementId, SegmentId, InfoId, TracksId):
        member = _lookup(enum_cls, element_id)
        if member is not None:
            return member.name
    return f"0x{element_id:04x}"


def _remaining(cursor: BinaryIO) -> int:
    pos = cursor.tell()
    end = cursor.seek(0, io.SEEK_END)
    cursor.seek(pos)
    return max(0, end - pos)


@dataclass
class SegmentInfo:
    """Segment information; ``duration`` is in nanoseconds."""

    duration: float = 0.0
    date: Optional[datetime] = None


@dataclass
class TracksInfo:
    width: int = 0
    height: int = 0


@dataclass
class VideoTrackInfo:
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class SeekEntry:
    """One SeekHead entry: an element ID and its position."""

    seek_id: int
    seek_pos: int

    def __repr__(self) -> str:
        return f"SeekEntry(seek_id={_id_name(self.seek_id)}, seek_pos={self.seek_pos})"


@dataclass
class EbmlFileInfo:
    doc_type: str = ""
    segment_info: SegmentInfo = field(default_factory=SegmentInfo)
    tracks_info: TracksInfo = field(default_factory=TracksInfo)

    def track_info(self) -> Dict[str, object]:
        """Return the track metadata as a mapping of tag name to value."""
        info: Dict[str, object] = {}
        if self.segment_info.date is not None:
            info["CreateDate"] = self.segment_info.date
        ms = self.segment_info.duration / 1000.0 / 1000.0
        if math.isnan(ms) or ms <= 0:
            duration_ms = 0
        elif ms >= _U64_MAX:
            duration_ms = _U64_MAX
        else:
            duration_ms = int(ms)
        info["DurationMs"] = duration_ms
        info["ImageWidth"] = self.tracks_info.width
        info["ImageHeight"] = self.tracks_info.height
        return info


def parse_webm(data: Bytes) -> EbmlFileInfo:
    """Parse the metadata of an EBML based file held in ``data``."""
    data = bytes(data)
    cursor = io.BytesIO(data)
    doc_type = parse_ebml_doc_type(cursor)
    pos = cursor.tell()

    cursor = io.BytesIO(data[pos:])
    header = next_element_header(cursor)
    if header.id != TopElementId.SEGMENT:
        raise NotWebmFile("not an WEBM file")
    pos += cursor.tell()

    file_info = EbmlFileInfo(doc_type=doc_type)
    info_set = False
    tracks_set = False

    try:
        seeks: Optional[Dict[int, int]] = parse_seeks(data, pos)
    except MediaError:
        seeks = None

    if seeks is not None:
        info_pos = seeks.get(SegmentId.INFO)
        tracks_pos = seeks.get(SegmentId.TRACKS)
        if info_pos is not None:
            info = parse_segment_info(data, info_pos)
            if info is not None:
                info_set = True
                file_info.segment_info = info
        if tracks_pos is not None:
            tracks = parse_tracks_info(data, tracks_pos)
            if tracks is not None:
                tracks_set = True
                file_info.tracks_info = tracks

    if not info_set:
        # The first Info element should come before the first Tracks element.
        cursor = io.BytesIO(data[pos:])
        header = travel_while(cursor, lambda h: h.id != SegmentId.INFO)
        start = pos + cursor.tell() - header.header_size
        info = parse_segment_info(data[start:], 0)
        if info is not None:
            file_info.segment_info = info

    if not tracks_set:
        cursor = io.BytesIO(data[pos:])
        header = travel_while(cursor, lambda h: h.id != SegmentId.TRACKS)
        start = pos + cursor.tell() - header.header_size
        tracks = parse_tracks_info(data[start:], 0)
        if tracks is not None:
            file_info.tracks_info = tracks

    return file_info


def _element_body(data: bytes, pos: int) -> bytes:
    if pos >= len(data):
        raise Incomplete(pos - len(data) + 1)
    cursor = io.BytesIO(data[pos:])
    header = next_element_header(cursor)
    remaining = _remaining(cursor)
    if remaining < header.data_size:
        raise Incomplete(header.data_size - remaining)
    return cursor.read(header.data_size)


def parse_tracks_info(data: Bytes, pos: int) -> Optional[TracksInfo]:
    """Parse the Tracks element at ``pos``, returning the first video track's size."""
    body = _element_body(bytes(data), pos)
    remain = body
    while True:
        try:
            return _parse_track_entry(remain)
        except MediaError:
            pass
        try:
            remain = _skip_element(remain)
        except MediaError:
            return None


def _parse_track_entry(data: bytes) -> Optional[TracksInfo]:
    cursor = io.BytesIO(data)
    header = next_element_header(cursor)
    if header.id != TracksId.TRACK_ENTRY:
        raise ParsingFailed("not a track entry")
    if _remaining(cursor) < header.data_size:
        raise ParsingFailed("incomplete track entry")
    track = _parse_track(cursor.read(header.data_size))
    if track is None:
        return None
    return TracksInfo(track.width, track.height)


def _skip_element(data: bytes) -> bytes:
    cursor = io.BytesIO(data)
    header = next_element_header(cursor)
    skip = min(_remaining(cursor), header.data_size)
    return data[cursor.tell() + skip:]


def _parse_track(data: bytes) -> Optional[VideoTrackInfo]:
    cursor = io.BytesIO(data)
    while _remaining(cursor):
        header = next_element_header(cursor)
        start = cursor.tell()
        cursor.seek(header.data_size, io.SEEK_CUR)
        if _lookup(TracksId, header.id) is not TracksId.VIDEO_TRACK:
            continue
        end = start + header.data_size
        if end > len(data):
            continue
        return _parse_video_track(data[start:end])
    return None


def _parse_video_track(data: bytes) -> Optional[VideoTrackInfo]:
    cursor = io.BytesIO(data)
    info = VideoTrackInfo()

    header = travel_while(cursor, lambda h: h.id != TracksId.PIXEL_WIDTH)
    width = get_as_u64(cursor, header.data_size)
    if width is not None:
        info.width = width & _U32_MASK

    cursor.seek(0)
    header = travel_while(cursor, lambda h: h.id != TracksId.PIXEL_HEIGHT)
    height = get_as_u64(cursor, header.data_size)
    if height is not None:
        info.height = height & _U32_MASK

    return None if info == VideoTrackInfo() else info


def parse_segment_info(data: Bytes, pos: int) -> Optional[SegmentInfo]:
    """Parse the Info element at ``pos``; ``None`` if its body is truncated."""
    body = _element_body(bytes(data), pos)
    try:
        return _parse_segment_info_body(io.BytesIO(body))
    except Incomplete:
        return None


def _date_from_nanos(value: int) -> datetime:
    nanos = value - (1 << 64) if value >= 1 << 63 else value
    return _EPOCH_2001 + timedelta(microseconds=nanos // 1000)


def _parse_segment_info_body(cursor: BinaryIO) -> SegmentInfo:
    # A segment tick is TimestampScale nanoseconds, one millisecond by default.
    time_scale = _DEFAULT_TIME_SCALE
    info = SegmentInfo()

    while _remaining(cursor):
        header = next_element_header(cursor)
        info_id = _lookup(InfoId, header.id)
        if info_id is InfoId.TIMESTAMP_SCALE:
            value = get_as_u64(cursor, header.data_size)
            if value is not None:
                time_scale = value
        elif info_id is InfoId.DURATION:
            duration = get_as_f64(cursor, header.data_size)
            if duration is not None:
                info.duration = duration * float(time_scale)
        elif info_id is InfoId.DATE:
            value = get_as_u64(cursor, header.data_size)
            if value is not None:
                info.date = _date_from_nanos(value)
        else:
            cursor.seek(header.data_size, io.SEEK_CUR)

    return info


def parse_seeks(data: Bytes, pos: int) -> Dict[int, int]:
    """Read the SeekHead after ``pos``; map element IDs to absolute positions."""
    data = bytes(data)
    cursor = io.BytesIO(data[pos:])
    header = find_element_by_id(cursor, SegmentId.SEEK_HEAD)
    remaining = _remaining(cursor)
    if remaining < header.data_size:
        raise Incomplete(header.data_size - remaining)

    header_pos = pos + cursor.tell() - header.header_size
    seeks = parse_seek_head(io.BytesIO(cursor.read(header.data_size)))
    return {seek_id: seek_pos + header_pos for seek_id, seek_pos in seeks.items()}


def parse_seek_head(cursor: BinaryIO) -> Dict[int, int]:
    """Read every Seek entry of a SeekHead body; invalid entries are ignored."""
    entries: Dict[int, int] = {}
    while _remaining(cursor):
        try:
            entry = parse_seek_entry(cursor)
        except InvalidSeekEntry:
            continue
        if entry is not None:
            entries[entry.seek_id] = entry.seek_pos
    return entries


def parse_seek_entry(cursor: BinaryIO) -> Optional[SeekEntry]:
    """Read one SeekHead child; ``None`` for CRC-32 and Void elements."""
    seek_id = INVALID_ELEMENT_ID
    seek_pos = 0

    element_id = read_u64_with_marker(cursor)
    data_size = read_size(cursor)
    remaining = _remaining(cursor)
    if remaining < data_size:
        raise Incomplete(data_size - remaining)

    if element_id != SeekHeadId.SEEK:
        cursor.seek(data_size, io.SEEK_CUR)
        if element_id in (EBMLGlobalId.CRC32, EBMLGlobalId.VOID):
            return None
        raise InvalidSeekEntry("invalid seek entry")

    buf = io.BytesIO(cursor.read(data_size))
    while _remaining(buf):
        child_id = read_u64_with_marker(buf)
        size = read_size(buf)
        if child_id == SeekHeadId.SEEK_ID:
            seek_id = read_u64_with_marker(buf) & _U32_MASK
        elif child_id == SeekHeadId.SEEK_POSITION:
            position = get_as_u64(buf, size)
            if position is None:
                raise InvalidSeekEntry("invalid seek entry")
            seek_pos = position
        else:
            raise InvalidSeekEntry("invalid seek entry")
        if seek_id != INVALID_ELEMENT_ID and seek_pos != 0:
            break

    if seek_id == INVALID_ELEMENT_ID or seek_pos == 0:
        raise InvalidSeekEntry("invalid seek entry")
    return SeekEntry(seek_id, seek_pos)