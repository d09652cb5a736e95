"""Domain models for slmio.

This module contains the document model of a laser powder-bed build file:
header, parts (models) with their laser parameter sets, and layers of scan
geometry. All models are designed to be:

- Independent of any concrete file format
- Mutable containers owned by a single document
- Serializable to named-field snapshots

Key classes:
- Header: File-level metadata
- BuildStyle: A set of laser parameters
- Model: A part and its build styles
- LayerGeometry: Base of PointsGeometry, ContourGeometry and HatchGeometry
- Layer: A height slice holding ordered geometry
- BuildDocument: Header, models and layers of one build
"""

from slmio.domain.build_style import BuildStyle, LaserMode
from slmio.domain.document import SNAPSHOT_VERSION, BuildDocument
from slmio.domain.geometry import (
    ContourGeometry,
    HatchGeometry,
    LayerGeometry,
    LayerGeometryType,
    PointsGeometry,
)
from slmio.domain.header import Header
from slmio.domain.layer import Layer, ScanMode
from slmio.domain.model import Model

__all__: list[str] = [
    # Enums
    "LaserMode",
    "LayerGeometryType",
    "ScanMode",
    # Core types
    "Header",
    "BuildStyle",
    "Model",
    "LayerGeometry",
    "PointsGeometry",
    "ContourGeometry",
    "HatchGeometry",
    "Layer",
    "BuildDocument",
    "SNAPSHOT_VERSION",
]
