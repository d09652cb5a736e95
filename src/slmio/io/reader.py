"""Base reader for build files.

This module provides the abstract Reader class every concrete build file
format implements. The base class owns the parse state machine, the
document produced by a parse, and the hydration of layers whose geometry was
left on disk.
"""

from abc import ABC, abstractmethod
from enum import Enum, auto
from pathlib import Path
from typing import BinaryIO, ClassVar

import structlog

from slmio.config import ReaderConfig
from slmio.domain.document import BuildDocument
from slmio.domain.geometry import LayerGeometry
from slmio.domain.header import Header
from slmio.domain.layer import Layer
from slmio.domain.model import Model
from slmio.exceptions import FileLoadError
from slmio.utils import DocumentLogger, TransferStats


class ReaderState(Enum):
    """Parse state of a reader."""

    UNPARSED = auto()
    PARSING = auto()
    PARSED = auto()
    FAILED = auto()


class Reader(ABC):
    """Parses a build file into a header, models and layers.

    Subclasses implement ``_parse`` and ``get_layer_thickness``. Formats that
    defer layer geometry also implement ``_read_layer_geometry`` and attach
    ``self._hydrate`` as the loader of each deferred layer.

    Example:
        reader = SlmbReader("build.slmb")
        reader.parse()
        for layer in reader.layers:
            print(layer.z, len(layer))
    """

    format_name: ClassVar[str] = ""

    def __init__(
        self,
        file_path: Path | str | None = None,
        config: ReaderConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            file_path: Path of the build file to read
            config: Reader settings (defaults if None)
            logger: Bound logger for transfer events
        """
        self._file_path = Path(file_path) if file_path is not None else None
        self._source_path: Path | None = None
        self.config = config if config is not None else ReaderConfig()
        self._document: BuildDocument | None = None
        self._state = ReaderState.UNPARSED
        self._doc_logger = DocumentLogger(
            logger if logger is not None else structlog.get_logger("slmio.io.reader")
        )

    def set_file_path(self, file_path: Path | str) -> None:
        """Set the path of the build file to read. No I/O is performed."""
        if self._state == ReaderState.PARSING:
            raise RuntimeError("Cannot change file path while parsing")
        self._file_path = Path(file_path)

    def get_file_path(self) -> Path | None:
        """Return the configured build file path."""
        return self._file_path

    @property
    def file_path(self) -> Path | None:
        """Configured build file path."""
        return self._file_path

    @property
    def state(self) -> ReaderState:
        """Current parse state."""
        return self._state

    @property
    def stats(self) -> TransferStats:
        """Statistics of the last parse and any hydration since."""
        return self._doc_logger.stats

    def _require_path(self) -> Path:
        if self._file_path is None:
            raise RuntimeError("No file path set. Call set_file_path() first.")
        return self._file_path

    def _require_document(self) -> BuildDocument:
        if self._document is None:
            raise RuntimeError("Build file not parsed. Call parse() first.")
        return self._document

    def get_file_size(self) -> int:
        """Return the size of the build file in bytes.

        Raises:
            FileLoadError: If the file does not exist or cannot be accessed
        """
        path = self._require_path()
        try:
            return path.stat().st_size
        except OSError as e:
            raise FileLoadError(str(path), e.strerror or str(e)) from e

    def parse(self) -> bool:
        """Parse the build file.

        Returns:
            True once the header, models and layers are available

        Raises:
            FileLoadError: If the file cannot be opened or read
            FileFormatError: If the file structure is invalid
            RuntimeError: If the reader has already parsed (see reset())
        """
        if self._state == ReaderState.PARSED:
            raise RuntimeError("Build file already parsed. Call reset() to parse again.")
        if self._state == ReaderState.PARSING:
            raise RuntimeError("Reader is already parsing")

        path = self._require_path()
        self._state = ReaderState.PARSING
        self._document = None
        self._doc_logger.reset()

        try:
            self._doc_logger.log_parse_start(str(path), self.get_file_size())
            self._source_path = path
            try:
                with path.open("rb") as stream:
                    document = self._parse(stream)
            except OSError as e:
                raise FileLoadError(str(path), e.strerror or str(e)) from e
        except Exception as e:
            self._state = ReaderState.FAILED
            self._source_path = None
            self._doc_logger.log_error(str(path), e)
            raise

        self._document = document
        self._state = ReaderState.PARSED

        deferred = sum(1 for layer in document.layers if not layer.is_loaded())
        self._doc_logger.log_parse_complete(
            path=str(path),
            model_count=len(document.models),
            layer_count=len(document.layers),
            deferred_layers=deferred,
            geometry_count=document.geometry_count(),
        )
        return True

    def reset(self) -> None:
        """Drop the parsed document so the reader can parse again."""
        if self._state == ReaderState.PARSING:
            raise RuntimeError("Cannot reset while parsing")
        self._document = None
        self._source_path = None
        self._state = ReaderState.UNPARSED

    @abstractmethod
    def _parse(self, stream: BinaryIO) -> BuildDocument:
        """Read a complete document from an open binary stream.

        Must raise FileFormatError on structural problems and must not return
        a partially built document.
        """

    @abstractmethod
    def get_layer_thickness(self) -> float:
        """Return the nominal layer thickness of the build (mm)."""

    def _read_layer_geometry(self, stream: BinaryIO, layer: Layer) -> list[LayerGeometry]:
        """Read one deferred layer's geometry; ``stream`` is positioned at it."""
        raise NotImplementedError(f"{type(self).__name__} does not defer layer geometry")

    def _hydrate(self, layer: Layer) -> list[LayerGeometry]:
        """Loader attached to deferred layers: re-read the source at the layer's offset."""
        path = self._source_path
        if path is None:
            raise RuntimeError("Reader has no parsed source to load layer geometry from")

        try:
            try:
                with path.open("rb") as stream:
                    stream.seek(layer.layer_file_position)
                    geometry = self._read_layer_geometry(stream, layer)
            except OSError as e:
                raise FileLoadError(str(path), e.strerror or str(e)) from e
        except Exception as e:
            self._doc_logger.log_error(str(path), e)
            raise

        self._doc_logger.log_layer_hydrated(layer.layer_id, layer.layer_file_position, len(geometry))
        return geometry

    def load_layer(self, layer: Layer) -> None:
        """Load a deferred layer's geometry now."""
        layer.load()

    def load_all_layers(self) -> None:
        """Load the geometry of every deferred layer."""
        for layer in self.layers:
            layer.load()

    @property
    def document(self) -> BuildDocument:
        """The parsed document."""
        return self._require_document()

    @property
    def header(self) -> Header:
        """The parsed header."""
        return self._require_document().header

    @property
    def models(self) -> tuple[Model, ...]:
        """The parsed models, in file order."""
        return tuple(self._require_document().models)

    @property
    def layers(self) -> tuple[Layer, ...]:
        """The parsed layers, in file order."""
        return tuple(self._require_document().layers)

    def get_model_by_id(self, mid: int) -> Model:
        """Get a parsed model by id.

        Raises:
            ModelNotFoundError: If no model has the given id
        """
        return self._require_document().get_model(mid)

    def close(self) -> None:
        """Release the parsed document."""
        self.reset()

    def __enter__(self) -> "Reader":
        """Context manager entry."""
        self.parse()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()
