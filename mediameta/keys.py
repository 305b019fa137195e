"""The QuickTime `keys` metadata atom (moov/meta/keys)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple, Union

from mediameta.boxes import FullBoxHeader, parse_full_box
from mediameta.errors import ParsingFailed

Bytes = Union[bytes, bytearray, memoryview]


def _take(view: memoryview, count: int) -> Tuple[memoryview, memoryview]:
    if len(view) < count:
        raise ParsingFailed(f"not enough bytes: need {count}, have {len(view)}")
    return view[count:], view[:count]


def _u32(view: memoryview) -> Tuple[memoryview, int]:
    remain, chunk = _take(view, 4)
    return remain, int.from_bytes(chunk, "big")


@dataclass(frozen=True)
class KeyEntry:
    """A metadata key: its size, four-character namespace and key name."""

    size: int
    namespace: str
    key: str


@dataclass(frozen=True)
class KeysBox:
    header: FullBoxHeader
    entry_count: int
    entries: List[KeyEntry] = field(default_factory=list)


def parse_key_entry(data: Bytes) -> Tuple[memoryview, KeyEntry]:
    """Parse one key entry, returning the bytes after it and the entry."""
    remain, length = _u32(memoryview(data))
    if length < 4:
        raise ParsingFailed("invalid KeyEntry header")
    remain, raw = _take(remain, length - 4)
    try:
        text = bytes(raw).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParsingFailed("invalid utf-8 in KeyEntry") from exc
    return remain, KeyEntry(size=len(raw) + 4, namespace=text[:4], key=text[4:])


def _parse_keys_body(body: memoryview, header: FullBoxHeader) -> Tuple[memoryview, KeysBox]:
    remain, entry_count = _u32(body)
    entries = []
    for _ in range(entry_count):
        remain, entry = parse_key_entry(remain)
        entries.append(entry)
    return remain, KeysBox(header, entry_count, entries)


def parse_keys_box(data: Bytes) -> Tuple[memoryview, KeysBox]:
    """Parse a `keys` box, returning the bytes after it and the box."""
    return parse_full_box(data, _parse_keys_body)