"""slmio - Layer geometry documents for laser powder-bed scan files.

slmio models the contents of an additive-manufacturing machine build file
(header, parts with their laser parameter sets, and per-height layers of
contour, hatch and point geometry) and provides a pluggable Reader/Writer
contract that every concrete machine format implements.

Example:
    $ slmio convert slmb build.slmb --sort-layers

This will read build.slmb and write build-converted.slmb with its layers
emitted in ascending z order.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
