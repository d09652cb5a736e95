"""Registry of build file formats.

Each concrete format is a Reader/Writer pair registered under a mode name
(for example "slmb"). The CLI and other callers look formats up by name
instead of importing format modules directly.
"""

from dataclasses import dataclass

from slmio.exceptions import UnknownFormatError
from slmio.io.reader import Reader
from slmio.io.writer import Writer


@dataclass(frozen=True)
class FormatSpec:
    """A registered format.

    Attributes:
        name: Mode name used to select the format
        reader_cls: Reader implementation
        writer_cls: Writer implementation
        extension: Default file extension, including the dot
        description: Human-readable description
    """

    name: str
    reader_cls: type[Reader]
    writer_cls: type[Writer]
    extension: str = ""
    description: str = ""


class FormatRegistry:
    """Maps mode names to Reader/Writer pairs."""

    def __init__(self) -> None:
        self._formats: dict[str, FormatSpec] = {}

    def register(
        self,
        name: str,
        reader_cls: type[Reader],
        writer_cls: type[Writer],
        extension: str = "",
        description: str = "",
        replace: bool = False,
    ) -> FormatSpec:
        """Register a format under a mode name.

        Args:
            name: Mode name (case-insensitive)
            reader_cls: Reader implementation
            writer_cls: Writer implementation
            extension: Default file extension
            description: Human-readable description
            replace: Allow replacing an existing registration

        Returns:
            The registered FormatSpec

        Raises:
            ValueError: If the name is taken and replace is False
        """
        key = name.lower()
        if key in self._formats and not replace:
            raise ValueError(f"Format '{key}' is already registered")

        spec = FormatSpec(
            name=key,
            reader_cls=reader_cls,
            writer_cls=writer_cls,
            extension=extension,
            description=description,
        )
        self._formats[key] = spec
        return spec

    def unregister(self, name: str) -> None:
        """Remove a registered format.

        Raises:
            UnknownFormatError: If the name is not registered
        """
        self.get(name)
        del self._formats[name.lower()]

    def get(self, name: str) -> FormatSpec:
        """Look up a format by mode name.

        Raises:
            UnknownFormatError: If the name is not registered
        """
        spec = self._formats.get(name.lower())
        if spec is None:
            raise UnknownFormatError(name, self.names())
        return spec

    def names(self) -> list[str]:
        """Registered mode names, sorted."""
        return sorted(self._formats)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._formats


registry = FormatRegistry()


def register_format(
    name: str,
    reader_cls: type[Reader],
    writer_cls: type[Writer],
    extension: str = "",
    description: str = "",
    replace: bool = False,
) -> FormatSpec:
    """Register a format in the default registry."""
    return registry.register(
        name,
        reader_cls,
        writer_cls,
        extension=extension,
        description=description,
        replace=replace,
    )


def get_reader(name: str) -> type[Reader]:
    """Get the Reader class registered under a mode name."""
    return registry.get(name).reader_cls


def get_writer(name: str) -> type[Writer]:
    """Get the Writer class registered under a mode name."""
    return registry.get(name).writer_cls


def available_formats() -> list[str]:
    """Mode names registered in the default registry."""
    return registry.names()
