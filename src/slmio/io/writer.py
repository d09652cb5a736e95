"""Base writer for build files.

This module provides the abstract Writer class every concrete build file
format implements. The base class validates documents, orders layers,
computes aggregates over a layer set, and stages output in a temporary file
that only replaces the destination once the format has written everything.
"""

import os
import stat
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, ClassVar

import structlog

from slmio.config import WriterConfig
from slmio.domain.geometry import LayerGeometryType
from slmio.domain.header import Header
from slmio.domain.layer import Layer
from slmio.domain.model import Model
from slmio.exceptions import DocumentValidationError, EmptyLayerSetError, FileSaveError
from slmio.utils import DocumentLogger, TransferStats


def _output_mode(path: Path) -> int:
    """Permission bits for a new output file: the existing file's, else 0666 less umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned extent of a set of layers.

    x and y come from geometry coordinates, z from the layer heights of the
    layers that hold coordinates.
    """

    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    def to_tuple(self) -> tuple[float, float, float, float, float, float]:
        """Convert to (min_x, min_y, min_z, max_x, max_y, max_z)."""
        return (self.min_x, self.min_y, self.min_z, self.max_x, self.max_y, self.max_z)

    def to_2d(self) -> tuple[float, float, float, float]:
        """Convert to (min_x, min_y, max_x, max_y)."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)


class Writer(ABC):
    """Serializes a header, models and layers into a build file.

    Subclasses implement ``_write``, which receives an open binary stream
    and the layers already in emission order.

    Example:
        writer = SlmbWriter("build.slmb")
        writer.sort_layers = True
        writer.write(header, models, layers)
    """

    format_name: ClassVar[str] = ""

    def __init__(
        self,
        file_path: Path | str | None = None,
        config: WriterConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            file_path: Destination path
            config: Writer settings (defaults if None)
            logger: Bound logger for transfer events
        """
        self._file_path = Path(file_path) if file_path is not None else None
        self.config = config if config is not None else WriterConfig()
        self._sort_layers = self.config.sort_layers
        self._doc_logger = DocumentLogger(
            logger if logger is not None else structlog.get_logger("slmio.io.writer")
        )

    def set_file_path(self, file_path: Path | str) -> None:
        """Set the destination path."""
        self._file_path = Path(file_path)

    def get_file_path(self) -> Path | None:
        """Return the destination path."""
        return self._file_path

    @property
    def file_path(self) -> Path | None:
        """Destination path."""
        return self._file_path

    @property
    def sort_layers(self) -> bool:
        """Whether layers are emitted in ascending z instead of supplied order."""
        return self._sort_layers

    @sort_layers.setter
    def sort_layers(self, value: bool) -> None:
        self._sort_layers = bool(value)

    @property
    def stats(self) -> TransferStats:
        """Statistics of the last write."""
        return self._doc_logger.stats

    def order_layers(self, layers: Iterable[Layer]) -> list[Layer]:
        """Return layers in emission order.

        With sort_layers set, layers are ordered by z ascending with ties
        broken by layer id; otherwise the supplied order is kept.
        """
        if self._sort_layers:
            return sorted(layers, key=lambda layer: (layer.z, layer.layer_id))
        return list(layers)

    def get_layer_min_max(self, layers: Sequence[Layer]) -> tuple[int | float, int | float]:
        """Return the (min, max) layer z.

        Raises:
            EmptyLayerSetError: If no layers are supplied
        """
        if not layers:
            raise EmptyLayerSetError("layer z range")
        zs = [layer.z for layer in layers]
        return (min(zs), max(zs))

    def get_total_num_hatches(self, layers: Iterable[Layer]) -> int:
        """Count hatch segments across all layers.

        Raises:
            DocumentValidationError: If a hatch has an odd number of rows
        """
        return sum(
            hatch.num_hatches for layer in layers for hatch in layer.get_hatch_geometry()
        )

    def get_total_num_contours(self, layers: Iterable[Layer]) -> int:
        """Count contour items across all layers."""
        return sum(len(layer.get_contour_geometry()) for layer in layers)

    def get_bounding_box(self, layers: Iterable[Layer]) -> BoundingBox:
        """Calculate the union extent of every coordinate in every layer.

        Raises:
            EmptyLayerSetError: If the layers hold no coordinates
        """
        extents: list[tuple[float, float, float, float]] = []
        zs: list[float] = []

        for layer in layers:
            boxes = [geom.bounding_box() for geom in layer.geometry]
            layer_extents = [bbox for bbox in boxes if bbox is not None]
            if layer_extents:
                extents.extend(layer_extents)
                zs.append(layer.z)

        if not extents:
            raise EmptyLayerSetError("bounding box")

        return BoundingBox(
            min_x=min(e[0] for e in extents),
            min_y=min(e[1] for e in extents),
            min_z=min(zs),
            max_x=max(e[2] for e in extents),
            max_y=max(e[3] for e in extents),
            max_z=max(zs),
        )

    def validate(
        self,
        header: Header,
        models: Sequence[Model],
        layers: Sequence[Layer],
    ) -> None:
        """Check the document's referential and structural invariants.

        Raises:
            DocumentValidationError: On duplicate model or build style ids,
                geometry referencing a missing model or build style,
                non-finite coordinates, or hatches with an odd number of rows
        """
        if header.z_unit <= 0:
            raise DocumentValidationError(
                f"Header z_unit must be positive, got {header.z_unit}", field="z_unit"
            )

        bids_by_mid: dict[int, set[int]] = {}
        for model in models:
            if model.mid in bids_by_mid:
                raise DocumentValidationError(
                    f"Duplicate model id {model.mid}", field="mid", mid=model.mid
                )
            bids: set[int] = set()
            for style in model.build_styles:
                if style.bid in bids:
                    raise DocumentValidationError(
                        f"Duplicate build style id {style.bid} in model {model.mid}",
                        field="bid",
                        mid=model.mid,
                        bid=style.bid,
                    )
                bids.add(style.bid)
            bids_by_mid[model.mid] = bids

        for layer in layers:
            for index, geom in enumerate(layer.geometry):
                where = f"layer {layer.layer_id} geometry {index}"
                if geom.type == LayerGeometryType.INVALID:
                    raise DocumentValidationError(
                        f"{where} has no geometry type",
                        field="type",
                        layer_id=layer.layer_id,
                    )
                model_bids = bids_by_mid.get(geom.mid)
                if model_bids is None:
                    raise DocumentValidationError(
                        f"{where} references missing model {geom.mid}",
                        field="mid",
                        mid=geom.mid,
                        layer_id=layer.layer_id,
                    )
                if geom.bid not in model_bids:
                    raise DocumentValidationError(
                        f"{where} references missing build style {geom.bid} in model {geom.mid}",
                        field="bid",
                        mid=geom.mid,
                        bid=geom.bid,
                        layer_id=layer.layer_id,
                    )
                if not geom.is_finite():
                    raise DocumentValidationError(
                        f"{where} has non-finite coordinates",
                        field="coords",
                        mid=geom.mid,
                        bid=geom.bid,
                        layer_id=layer.layer_id,
                    )
                if geom.type == LayerGeometryType.HATCH and geom.num_points % 2 != 0:
                    raise DocumentValidationError(
                        f"{where} is a hatch with an odd number of rows ({geom.num_points})",
                        field="coords",
                        mid=geom.mid,
                        bid=geom.bid,
                        layer_id=layer.layer_id,
                    )

    def write(
        self,
        header: Header,
        models: Sequence[Model],
        layers: Sequence[Layer],
    ) -> None:
        """Validate the document and write it to the destination.

        Output is staged in a temporary file next to the destination and
        moved into place only after the format has written everything, so a
        failed write never leaves a partial destination behind.

        Raises:
            DocumentValidationError: If the document is invalid (nothing written)
            FileSaveError: If the destination cannot be created or written
            FileFormatError: If the document violates a format constraint
        """
        if self._file_path is None:
            raise RuntimeError("No file path set. Call set_file_path() first.")
        path = self._file_path
        models = list(models)
        layers = list(layers)

        self._doc_logger.reset()
        try:
            self.validate(header, models, layers)
            ordered = self.order_layers(layers)
            self._doc_logger.log_write_start(str(path), len(ordered))
            self._commit(path, header, models, ordered)
        except Exception as e:
            self._doc_logger.log_error(str(path), e)
            raise

        self._doc_logger.log_write_complete(
            path=str(path),
            model_count=len(models),
            layer_count=len(ordered),
            geometry_count=sum(len(layer) for layer in ordered),
            size=path.stat().st_size,
        )

    def _commit(
        self,
        path: Path,
        header: Header,
        models: list[Model],
        layers: list[Layer],
    ) -> None:
        try:
            fd, staging = tempfile.mkstemp(
                prefix=f".{path.name}.",
                suffix=self.config.staging_suffix,
                dir=path.parent,
            )
        except OSError as e:
            raise FileSaveError(str(path), e.strerror or str(e)) from e

        committed = False
        try:
            with os.fdopen(fd, "wb") as stream:
                self._write(stream, header, models, layers)
            # mkstemp creates 0600; give the output the mode a plain open() would
            os.chmod(staging, _output_mode(path))
            os.replace(staging, path)
            committed = True
        except OSError as e:
            raise FileSaveError(str(path), e.strerror or str(e)) from e
        finally:
            if not committed:
                Path(staging).unlink(missing_ok=True)

    @abstractmethod
    def _write(
        self,
        stream: BinaryIO,
        header: Header,
        models: list[Model],
        layers: list[Layer],
    ) -> None:
        """Encode a validated document; ``layers`` are already in emission order."""
