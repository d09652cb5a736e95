"""Build file I/O layer for slmio.

This module defines the format-agnostic Reader/Writer contract and the
registry through which concrete formats are selected by name.

Key responsibilities:
- Parse build files into domain models (Reader)
- Hydrate deferred layer geometry from stored file offsets
- Validate, order and serialize documents with staged commits (Writer)
- Aggregate queries over layer sets (z range, counts, bounding box)

Key classes:
- Reader: Abstract build file parser
- Writer: Abstract build file serializer
- FormatRegistry: Mode name to Reader/Writer pair lookup
- SlmbReader / SlmbWriter: Reference binary format
"""

from slmio.io.formats import UNBUNDLED_FORMATS, SlmbReader, SlmbWriter
from slmio.io.reader import Reader, ReaderState
from slmio.io.registry import (
    FormatRegistry,
    FormatSpec,
    available_formats,
    get_reader,
    get_writer,
    register_format,
    registry,
)
from slmio.io.writer import BoundingBox, Writer

__all__ = [
    "BoundingBox",
    "FormatRegistry",
    "FormatSpec",
    "Reader",
    "ReaderState",
    "SlmbReader",
    "SlmbWriter",
    "UNBUNDLED_FORMATS",
    "Writer",
    "available_formats",
    "get_reader",
    "get_writer",
    "register_format",
    "registry",
]
