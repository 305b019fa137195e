"""Exceptions raised while reading media metadata."""

from __future__ import annotations

from typing import Any


class MediaError(Exception):
    """Base class for every error raised by this package."""


class ParseFailed(MediaError):
    """The input could not be parsed."""

    def __str__(self) -> str:
        return f"parse failed: {super().__str__()}"


class MediaIOError(MediaError):
    """Reading the underlying source failed."""

    def __str__(self) -> str:
        return f"io error: {super().__str__()}"


class UnrecognizedFileFormat(MediaError):
    """The file format is not one this package knows about."""

    def __init__(self) -> None:
        super().__init__("unrecognized file format")

    def __str__(self) -> str:
        return "unrecognized file format"


class Incomplete(ParseFailed):
    """More bytes are needed before parsing can go on.

    ``needed`` is the number of extra bytes required; an unknown or zero
    amount is reported as one byte.
    """

    def __init__(self, needed: int) -> None:
        self.needed = max(1, int(needed))
        self.state: Any = None
        super().__init__(self.needed)

    def __str__(self) -> str:
        return f"need more bytes: {self.needed}"


class ClearAndSkip(MediaError):
    """All buffered bytes are consumed and ``count`` bytes must be skipped.

    After skipping, the caller reads fresh data and parses again, handing
    ``state`` back to the parser.
    """

    def __init__(self, count: int, state: Any = None) -> None:
        self.count = count
        self.state = state
        super().__init__(count, state)

    def __str__(self) -> str:
        return f"clear and skip bytes: {self.count}"


class ParsingFailed(ParseFailed):
    """Parsing failed for a reason described by ``message``."""

    def __init__(self, message: str, state: Any = None) -> None:
        self.message = message
        self.state = state
        super().__init__(message)

    def __str__(self) -> str:
        return self.message