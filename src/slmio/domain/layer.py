"""Layer representation and scan ordering.

A Layer is one height slice of a build. It owns an ordered, heterogeneous
sequence of geometry. Readers may leave a layer's geometry on disk and attach
a loader; the geometry is then read the first time it is accessed and kept
for the lifetime of the layer.
"""

from collections.abc import Callable, Iterable
from enum import Enum, auto
from typing import Any

from slmio.domain.geometry import (
    ContourGeometry,
    HatchGeometry,
    LayerGeometry,
    LayerGeometryType,
    PointsGeometry,
)

LayerLoader = Callable[["Layer"], list[LayerGeometry]]


class ScanMode(Enum):
    """Order in which a layer's geometry is returned for scanning."""

    DEFAULT = auto()
    CONTOUR_FIRST = auto()
    HATCH_FIRST = auto()


class Layer:
    """A single height slice of a build.

    Example:
        layer = Layer(layer_id=0, z=40)
        layer.append_geometry(contour)
        for geom in layer.get_geometry(ScanMode.CONTOUR_FIRST):
            ...

    Attributes:
        layer_id: Layer id, unique within a document
        z: Layer height in stored units (see Header.z_unit)
        extras: Optional host-attached metadata, never read by slmio
    """

    def __init__(
        self,
        layer_id: int = 0,
        z: int | float = 0,
        geometry: Iterable[LayerGeometry] | None = None,
        extras: dict[str, Any] | None = None,
    ) -> None:
        self.layer_id = layer_id
        self.z = z
        self.extras: dict[str, Any] = dict(extras) if extras else {}
        self._geometry: list[LayerGeometry] = list(geometry) if geometry is not None else []
        self._loaded = True
        self._file_position = 0
        self._loader: LayerLoader | None = None

    def defer(self, file_position: int, loader: LayerLoader) -> None:
        """Mark the layer's geometry as not yet read.

        Args:
            file_position: Byte offset of the geometry in the source file
            loader: Callable returning the layer's geometry when invoked
        """
        self._geometry = []
        self._loaded = False
        self._file_position = file_position
        self._loader = loader

    def load(self) -> None:
        """Read deferred geometry now. Does nothing if already loaded."""
        if self._loaded:
            return
        if self._loader is None:
            raise RuntimeError(f"Layer {self.layer_id} is deferred but has no loader")

        self._geometry = list(self._loader(self))
        self._loaded = True
        self._loader = None

    def is_loaded(self) -> bool:
        """Check whether the layer's geometry is in memory."""
        return self._loaded

    @property
    def layer_file_position(self) -> int:
        """Byte offset of the layer's geometry in its source file (0 if none)."""
        return self._file_position

    @property
    def geometry(self) -> list[LayerGeometry]:
        """The layer's geometry in insertion order (hydrated on first access)."""
        self.load()
        return self._geometry

    @geometry.setter
    def geometry(self, value: Iterable[LayerGeometry]) -> None:
        self.set_geometry(value)

    def set_geometry(self, geometry: Iterable[LayerGeometry]) -> None:
        """Replace the layer's geometry, discarding any deferred read."""
        self._geometry = list(geometry)
        self._loaded = True
        self._loader = None

    def append_geometry(self, item: LayerGeometry) -> None:
        """Append geometry to the end of the layer.

        References (mid, bid) are not checked here; writers validate them.
        """
        self.load()
        self._geometry.append(item)

    def get_geometry(self, scan_mode: ScanMode = ScanMode.DEFAULT) -> list[LayerGeometry]:
        """Return the layer's geometry in the order given by the scan mode.

        DEFAULT keeps insertion order. CONTOUR_FIRST returns every contour
        followed by everything else, and HATCH_FIRST every hatch followed by
        everything else. Relative order inside each group is preserved.

        Args:
            scan_mode: Ordering policy

        Returns:
            New list of the layer's geometry
        """
        geometry = self.geometry

        if scan_mode == ScanMode.CONTOUR_FIRST:
            first_type = LayerGeometryType.POLYGON
        elif scan_mode == ScanMode.HATCH_FIRST:
            first_type = LayerGeometryType.HATCH
        else:
            return list(geometry)

        first = [geom for geom in geometry if geom.type == first_type]
        rest = [geom for geom in geometry if geom.type != first_type]
        return first + rest

    def get_points_geometry(self) -> list[PointsGeometry]:
        """Get the layer's point geometry in insertion order."""
        return [geom for geom in self.geometry if geom.type == LayerGeometryType.PNTS]  # type: ignore[misc]

    def get_hatch_geometry(self) -> list[HatchGeometry]:
        """Get the layer's hatch geometry in insertion order."""
        return [geom for geom in self.geometry if geom.type == LayerGeometryType.HATCH]  # type: ignore[misc]

    def get_contour_geometry(self) -> list[ContourGeometry]:
        """Get the layer's contour geometry in insertion order."""
        return [geom for geom in self.geometry if geom.type == LayerGeometryType.POLYGON]  # type: ignore[misc]

    def __len__(self) -> int:
        return len(self.geometry)

    def __repr__(self) -> str:
        count = len(self._geometry) if self._loaded else "deferred"
        return f"Layer(layer_id={self.layer_id}, z={self.z}, geometry={count})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, hydrating deferred geometry first.

        Returns:
            Dictionary representation of the layer
        """
        return {
            "layer_id": self.layer_id,
            "z": self.z,
            "geometry": [geom.to_dict() for geom in self.geometry],
            "extras": dict(self.extras),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Layer":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a layer

        Returns:
            Layer instance with its geometry loaded
        """
        return cls(
            layer_id=data["layer_id"],
            z=data["z"],
            geometry=[LayerGeometry.from_dict(g) for g in data["geometry"]],
            extras=data.get("extras", {}),
        )
