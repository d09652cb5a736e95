"""Concrete build file formats.

Importing this package registers every bundled format in the default
format registry.
"""

from slmio.io.formats.slmb import EXTENSION as SLMB_EXTENSION
from slmio.io.formats.slmb import SlmbReader, SlmbWriter
from slmio.io.registry import registry

# Machine formats with no bundled Reader/Writer. A third-party pair can be
# registered under these names with register_format().
UNBUNDLED_FORMATS = {
    "mtt": "Renishaw MTT",
    "realizer": "Realizer",
    "eos": "EOS SLI",
}

if "slmb" not in registry:
    registry.register(
        "slmb",
        SlmbReader,
        SlmbWriter,
        extension=SLMB_EXTENSION,
        description="Reference little-endian binary layout with seekable layers",
    )

__all__ = [
    "UNBUNDLED_FORMATS",
    "SlmbReader",
    "SlmbWriter",
]
