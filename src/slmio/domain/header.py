"""Build file header.

This module defines the file-level metadata written at the start of every
machine build file.
"""

from dataclasses import dataclass, field, fields
from typing import Any


@dataclass
class Header:
    """File-level metadata for a build file.

    Attributes:
        file_name: Internal descriptor of the build (not the path on disk)
        creator: Name of the software or person that produced the build
        version: (major, minor) version of the build file content
        z_unit: Integer scale factor mapping stored layer z to real units,
            e.g. 1000 means z is stored in microns for a millimetre build
        extras: Optional host-attached metadata, never read by slmio
    """

    file_name: str = ""
    creator: str = ""
    version: tuple[int, int] = (0, 0)
    z_unit: int = 1000
    extras: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        major, minor = self.version
        self.version = (int(major), int(minor))

    def set_version(self, major: int, minor: int) -> None:
        """Set the header version."""
        self.version = (int(major), int(minor))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary, one entry per dataclass field.

        Returns:
            Dictionary representation of the header
        """
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["version"] = list(self.version)
        data["extras"] = dict(self.extras)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Header":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a header

        Returns:
            Header instance
        """
        values = {f.name: data[f.name] for f in fields(cls) if f.name != "extras"}
        return cls(**values, extras=dict(data.get("extras", {})))
