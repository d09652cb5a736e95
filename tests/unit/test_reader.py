"""Unit tests for the Reader base class.

The parse state machine and layer hydration are exercised through a small
in-test format that reads a fixed document.
"""

from unittest.mock import MagicMock

import pytest

from slmio.config import ReaderConfig
from slmio.domain import BuildDocument, Header, Layer, Model, PointsGeometry
from slmio.exceptions import FileFormatError, FileLoadError, ModelNotFoundError
from slmio.io import Reader, ReaderState


class StubReader(Reader):
    """Reader returning a canned document; optionally defers every layer."""

    format_name = "stub"

    def __init__(self, *args, document=None, error=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.canned = document
        self.error = error
        self.payloads = []

    def _parse(self, stream):
        stream.read()
        if self.error is not None:
            raise self.error
        document = self.canned
        if self.config.lazy_load:
            for layer in document.layers:
                layer.defer(6, self._hydrate)
        return document

    def _read_layer_geometry(self, stream, layer):
        payload = stream.read()
        self.payloads.append(payload)
        return [PointsGeometry(mid=1, bid=1, coords=[[float(len(payload)), float(layer.layer_id)]])]

    def get_layer_thickness(self):
        return 0.04


@pytest.fixture
def build_file(tmp_path):
    path = tmp_path / "build.stub"
    path.write_bytes(b"HEADERxyz")
    return path


def make_document():
    return BuildDocument(
        header=Header(file_name="stub", version=(1, 0)),
        models=[Model(mid=1, name="first"), Model(mid=4, name="second")],
        layers=[Layer(layer_id=0, z=40), Layer(layer_id=1, z=80)],
    )


class TestReaderState:
    """Tests for the parse state machine."""

    def test_init(self, build_file):
        """Test reader starts unparsed and performs no I/O."""
        reader = StubReader(build_file, document=make_document())
        assert reader.state == ReaderState.UNPARSED
        assert reader.get_file_path() == build_file
        assert reader.file_path == build_file

    def test_set_file_path(self, build_file):
        """Test the path can be set after construction."""
        reader = StubReader(document=make_document())
        assert reader.get_file_path() is None
        reader.set_file_path(str(build_file))
        assert reader.get_file_path() == build_file

    def test_parse_success(self, build_file):
        """Test successful parse exposes the document."""
        reader = StubReader(build_file, document=make_document())
        assert reader.parse() is True
        assert reader.state == ReaderState.PARSED
        assert reader.header.file_name == "stub"
        assert [m.mid for m in reader.models] == [1, 4]
        assert [layer.layer_id for layer in reader.layers] == [0, 1]
        assert reader.get_layer_thickness() == 0.04

    def test_parse_without_path(self):
        """Test parse requires a file path."""
        reader = StubReader(document=make_document())
        with pytest.raises(RuntimeError, match="No file path set"):
            reader.parse()

    def test_parse_nonexistent_file(self, tmp_path):
        """Test a missing file raises FileLoadError."""
        reader = StubReader(tmp_path / "missing.stub", document=make_document())
        with pytest.raises(FileLoadError) as exc_info:
            reader.parse()
        assert "missing.stub" in exc_info.value.path
        assert reader.state == ReaderState.FAILED

    def test_parse_format_error_leaves_no_document(self, build_file):
        """Test a failed parse exposes nothing."""
        error = FileFormatError(str(build_file), "broken", offset=3)
        reader = StubReader(build_file, document=make_document(), error=error)

        with pytest.raises(FileFormatError):
            reader.parse()

        assert reader.state == ReaderState.FAILED
        with pytest.raises(RuntimeError, match="not parsed"):
            _ = reader.layers
        assert reader.stats.errors

    def test_accessors_before_parse(self, build_file):
        """Test accessing parsed data before parse raises RuntimeError."""
        reader = StubReader(build_file, document=make_document())
        with pytest.raises(RuntimeError, match="not parsed"):
            _ = reader.header
        with pytest.raises(RuntimeError, match="not parsed"):
            _ = reader.models
        with pytest.raises(RuntimeError, match="not parsed"):
            reader.get_model_by_id(1)

    def test_reparse_requires_reset(self, build_file):
        """Test parse twice without reset is rejected."""
        reader = StubReader(build_file, document=make_document())
        reader.parse()
        with pytest.raises(RuntimeError, match="already parsed"):
            reader.parse()

        reader.reset()
        assert reader.state == ReaderState.UNPARSED
        assert reader.parse() is True

    def test_failed_reader_can_parse_again(self, build_file):
        """Test a FAILED reader may retry without reset."""
        reader = StubReader(build_file, document=make_document(), error=FileFormatError("x", "y"))
        with pytest.raises(FileFormatError):
            reader.parse()

        reader.error = None
        assert reader.parse() is True

    def test_layers_are_read_only_view(self, build_file):
        """Test the returned collections cannot reshape the document."""
        reader = StubReader(build_file, document=make_document())
        reader.parse()
        assert isinstance(reader.layers, tuple)
        assert isinstance(reader.models, tuple)

    def test_context_manager(self, build_file):
        """Test context manager parses on entry and resets on exit."""
        reader = StubReader(build_file, document=make_document())
        with reader as parsed:
            assert parsed.state == ReaderState.PARSED
        assert reader.state == ReaderState.UNPARSED

    def test_get_file_size(self, build_file):
        """Test file size is reported from the filesystem."""
        reader = StubReader(build_file, document=make_document())
        assert reader.get_file_size() == 9

    def test_logger_receives_events(self, build_file):
        """Test parse events go to the injected logger."""
        logger = MagicMock()
        reader = StubReader(build_file, document=make_document(), logger=logger)
        reader.parse()

        logger.debug.assert_called()
        logger.info.assert_called_once()
        assert reader.stats.layer_count == 2
        assert reader.stats.model_count == 2


class TestModelLookup:
    """Tests for get_model_by_id."""

    def test_found(self, build_file):
        """Test lookup by id."""
        reader = StubReader(build_file, document=make_document())
        reader.parse()
        assert reader.get_model_by_id(4).name == "second"

    def test_not_found(self, build_file):
        """Test missing id raises ModelNotFoundError."""
        reader = StubReader(build_file, document=make_document())
        reader.parse()
        with pytest.raises(ModelNotFoundError) as exc_info:
            reader.get_model_by_id(2)
        assert exc_info.value.mid == 2
        assert isinstance(exc_info.value, LookupError)


class TestHydration:
    """Tests for deferred layer loading through the reader."""

    def test_lazy_parse_defers_layers(self, build_file):
        """Test lazily parsed layers are not loaded."""
        reader = StubReader(
            build_file, config=ReaderConfig(lazy_load=True), document=make_document()
        )
        reader.parse()

        assert all(not layer.is_loaded() for layer in reader.layers)
        assert reader.stats.deferred_layers == 2
        assert reader.payloads == []

    def test_hydrate_reads_at_layer_offset(self, build_file):
        """Test hydration seeks to the recorded file position."""
        reader = StubReader(
            build_file, config=ReaderConfig(lazy_load=True), document=make_document()
        )
        reader.parse()

        layer = reader.layers[1]
        points = layer.get_points_geometry()

        assert reader.payloads == [b"xyz"]
        assert points[0].coords.tolist() == [[3.0, 1.0]]
        assert not reader.layers[0].is_loaded()
        assert reader.stats.hydrated_layers == 1

    def test_load_all_layers(self, build_file):
        """Test every deferred layer can be loaded eagerly."""
        reader = StubReader(
            build_file, config=ReaderConfig(lazy_load=True), document=make_document()
        )
        reader.parse()
        reader.load_all_layers()
        assert all(layer.is_loaded() for layer in reader.layers)
        assert len(reader.payloads) == 2

    def test_hydrate_after_source_removed(self, build_file):
        """Test a vanished source file surfaces as FileLoadError."""
        reader = StubReader(
            build_file, config=ReaderConfig(lazy_load=True), document=make_document()
        )
        reader.parse()
        build_file.unlink()

        layer = reader.layers[0]
        with pytest.raises(FileLoadError):
            reader.load_layer(layer)
        assert not layer.is_loaded()

    def test_hydrate_after_close(self, build_file):
        """Test deferred layers cannot load once the reader is closed."""
        reader = StubReader(
            build_file, config=ReaderConfig(lazy_load=True), document=make_document()
        )
        reader.parse()
        layer = reader.layers[0]
        reader.close()

        with pytest.raises(RuntimeError, match="no parsed source"):
            layer.load()
