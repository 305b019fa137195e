"""Parsers for ISO base media boxes and EBML/WebM container metadata."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "boxes",
    "idat",
    "iinf",
    "iloc",
    "keys",
    "ilst",
    "meta",
    "mvhd",
    "tkhd",
    "vint",
    "element",
    "webm",
]