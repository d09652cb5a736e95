"""Layer geometry types.

This module defines the scan geometry stored inside a layer:
- LayerGeometryType: Tag identifying the geometry variant
- PointsGeometry: Independent exposure points
- ContourGeometry: A closed polyline boundary
- HatchGeometry: Independent line segments stored as point pairs

Every variant references a Model by ``mid`` and one of that model's
BuildStyles by ``bid``. The references are weak keys; they are resolved and
checked only when a document is written.
"""

from enum import Enum
from typing import Any, ClassVar

import numpy as np

from slmio.exceptions import DocumentValidationError, SnapshotError


class LayerGeometryType(Enum):
    """Geometry variant tag."""

    INVALID = 0
    PNTS = 1
    POLYGON = 2
    HATCH = 3


class LayerGeometry:
    """Base class for geometry stored in a layer.

    Coordinates are held as a float32 array of shape (N, 2), one row per
    point. The ``type`` tag is fixed per subclass and is read-only.

    Attributes:
        mid: Id of the model this geometry belongs to
        bid: Id of the build style (within the model) used to scan it
        coords: (N, 2) float32 coordinate array
        extras: Optional host-attached metadata, never read by slmio
    """

    _type: ClassVar[LayerGeometryType] = LayerGeometryType.INVALID

    @property
    def type(self) -> LayerGeometryType:
        """Variant tag, fixed per geometry class."""
        return self._type

    def __init__(
        self,
        mid: int = 0,
        bid: int = 0,
        coords: Any = None,
        extras: dict[str, Any] | None = None,
    ) -> None:
        self.mid = mid
        self.bid = bid
        self.coords = coords if coords is not None else np.empty((0, 2), dtype=np.float32)
        self.extras: dict[str, Any] = dict(extras) if extras else {}

    @property
    def coords(self) -> np.ndarray:
        """Coordinate array of shape (N, 2)."""
        return self._coords

    @coords.setter
    def coords(self, value: Any) -> None:
        arr = np.array(value, dtype=np.float32)
        if arr.size == 0:
            arr = arr.reshape(0, 2)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError(f"coords must be a 2D array of shape (N, 2), got {arr.shape}")
        self._coords = arr

    @property
    def num_points(self) -> int:
        """Number of coordinate rows."""
        return int(self._coords.shape[0])

    def is_finite(self) -> bool:
        """Check that no coordinate is NaN or infinite."""
        return bool(np.isfinite(self._coords).all())

    def bounding_box(self) -> tuple[float, float, float, float] | None:
        """Calculate the 2D extent of the coordinates.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y), or None if there are no points
        """
        if self.num_points == 0:
            return None
        mins = self._coords.min(axis=0)
        maxs = self._coords.max(axis=0)
        return (float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Coordinates are stored as nested lists of Python floats, which hold
        float32 values exactly.

        Returns:
            Dictionary representation of the geometry
        """
        return {
            "type": self.type.value,
            "mid": self.mid,
            "bid": self.bid,
            "coords": self._coords.tolist(),
            "extras": dict(self.extras),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LayerGeometry":
        """Deserialize from dictionary, choosing the variant from its tag.

        Args:
            data: Dictionary representation of a geometry item

        Returns:
            Instance of the variant named by ``data["type"]``

        Raises:
            SnapshotError: If the tag is unknown or does not match ``cls``
        """
        try:
            geometry_type = LayerGeometryType(data["type"])
        except ValueError as e:
            raise SnapshotError(f"unknown geometry type {data['type']!r}") from e

        variant = GEOMETRY_CLASSES.get(geometry_type)
        if variant is None:
            raise SnapshotError(f"geometry type {geometry_type.name} cannot be restored")
        if not issubclass(variant, cls):
            raise SnapshotError(
                f"expected {cls.__name__}, snapshot holds {variant.__name__}"
            )

        return variant(
            mid=data["mid"],
            bid=data["bid"],
            coords=data["coords"],
            extras=data.get("extras", {}),
        )

    def __len__(self) -> int:
        return self.num_points

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mid={self.mid}, bid={self.bid}, points={self.num_points})"


class PointsGeometry(LayerGeometry):
    """Independent exposure points, one per coordinate row."""

    _type: ClassVar[LayerGeometryType] = LayerGeometryType.PNTS


class ContourGeometry(LayerGeometry):
    """A closed polyline; the last point implicitly joins the first."""

    _type: ClassVar[LayerGeometryType] = LayerGeometryType.POLYGON

    def segments(self) -> np.ndarray:
        """Return the scan vectors of the closed polyline.

        Returns:
            Array of shape (N, 2, 2) where row i joins point i to point i+1,
            and the final row joins the last point back to the first
        """
        if self.num_points < 2:
            return np.empty((0, 2, 2), dtype=np.float32)
        return np.stack([self.coords, np.roll(self.coords, -1, axis=0)], axis=1)

    def length(self) -> float:
        """Total scan length of the closed polyline."""
        segs = self.segments()
        if len(segs) == 0:
            return 0.0
        return float(np.linalg.norm(segs[:, 1] - segs[:, 0], axis=1).sum())


class HatchGeometry(LayerGeometry):
    """Independent scan vectors; rows (2i, 2i+1) form segment i."""

    _type: ClassVar[LayerGeometryType] = LayerGeometryType.HATCH

    @property
    def num_hatches(self) -> int:
        """Number of hatch segments.

        Raises:
            DocumentValidationError: If the number of coordinate rows is odd
        """
        if self.num_points % 2 != 0:
            raise DocumentValidationError(
                f"Hatch geometry has an odd number of coordinate rows ({self.num_points})",
                field="coords",
                mid=self.mid,
                bid=self.bid,
            )
        return self.num_points // 2

    def segments(self) -> np.ndarray:
        """Return the hatch vectors as an (N/2, 2, 2) array."""
        return self.coords.reshape(self.num_hatches, 2, 2)

    def length(self) -> float:
        """Total scan length of all hatch vectors."""
        segs = self.segments()
        if len(segs) == 0:
            return 0.0
        return float(np.linalg.norm(segs[:, 1] - segs[:, 0], axis=1).sum())


GEOMETRY_CLASSES: dict[LayerGeometryType, type[LayerGeometry]] = {
    LayerGeometryType.PNTS: PointsGeometry,
    LayerGeometryType.POLYGON: ContourGeometry,
    LayerGeometryType.HATCH: HatchGeometry,
}
