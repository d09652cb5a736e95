"""Unit tests for the format registry."""

import pytest

from slmio.exceptions import UnknownFormatError
from slmio.io import (
    FormatRegistry,
    SlmbReader,
    SlmbWriter,
    available_formats,
    get_reader,
    get_writer,
    register_format,
    registry,
)


class TestFormatRegistry:
    """Tests for FormatRegistry."""

    def test_register_and_get(self):
        """Test a registered pair can be looked up."""
        formats = FormatRegistry()
        spec = formats.register("slmb", SlmbReader, SlmbWriter, extension=".slmb")

        assert formats.get("slmb") is spec
        assert spec.reader_cls is SlmbReader
        assert spec.writer_cls is SlmbWriter
        assert spec.extension == ".slmb"

    def test_names_are_case_insensitive(self):
        """Test names are normalised to lower case."""
        formats = FormatRegistry()
        formats.register("SLMB", SlmbReader, SlmbWriter)

        assert formats.names() == ["slmb"]
        assert "Slmb" in formats
        assert formats.get("sLmB").name == "slmb"

    def test_duplicate_registration(self):
        """Test a name cannot be registered twice by accident."""
        formats = FormatRegistry()
        formats.register("slmb", SlmbReader, SlmbWriter)
        with pytest.raises(ValueError, match="already registered"):
            formats.register("slmb", SlmbReader, SlmbWriter)

    def test_replace_registration(self):
        """Test replace=True overrides an existing entry."""
        formats = FormatRegistry()
        formats.register("slmb", SlmbReader, SlmbWriter, description="old")
        formats.register("slmb", SlmbReader, SlmbWriter, description="new", replace=True)
        assert formats.get("slmb").description == "new"

    def test_unknown_format(self):
        """Test lookups of unregistered names list what is available."""
        formats = FormatRegistry()
        formats.register("slmb", SlmbReader, SlmbWriter)
        with pytest.raises(UnknownFormatError) as exc_info:
            formats.get("mtt")
        assert exc_info.value.name == "mtt"
        assert exc_info.value.available == ["slmb"]
        assert "slmb" in str(exc_info.value)

    def test_unregister(self):
        """Test removing a format."""
        formats = FormatRegistry()
        formats.register("slmb", SlmbReader, SlmbWriter)
        formats.unregister("slmb")
        assert "slmb" not in formats
        with pytest.raises(UnknownFormatError):
            formats.unregister("slmb")

    def test_non_string_membership(self):
        """Test membership of non-strings is False."""
        assert 42 not in FormatRegistry()


class TestDefaultRegistry:
    """Tests for the module-level registry."""

    def test_slmb_registered(self):
        """Test the bundled format is available on import."""
        assert "slmb" in registry
        assert "slmb" in available_formats()
        assert registry.get("slmb").extension == ".slmb"

    def test_get_reader_and_writer(self):
        """Test class lookup helpers."""
        assert get_reader("slmb") is SlmbReader
        assert get_writer("SLMB") is SlmbWriter

    def test_register_format(self):
        """Test registering an extra mode in the default registry."""
        register_format("slmb-copy", SlmbReader, SlmbWriter, extension=".slmb")
        try:
            assert get_reader("slmb-copy") is SlmbReader
            assert "slmb-copy" in available_formats()
        finally:
            registry.unregister("slmb-copy")
        assert "slmb-copy" not in registry

    def test_get_unknown(self):
        """Test helper lookups of unregistered names."""
        with pytest.raises(UnknownFormatError):
            get_reader("eos")
        with pytest.raises(LookupError):
            get_writer("realizer")
