"""Model (part) representation.

A Model is a distinct part within a build. It owns the BuildStyles that
geometry belonging to the part references through ``bid``.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from slmio.domain.build_style import BuildStyle
from slmio.exceptions import BuildStyleNotFoundError


@dataclass
class Model:
    """A part within a build and its laser parameter sets.

    Attributes:
        mid: Model id, unique within a document
        top_layer_id: Id of the last layer holding geometry of this model
        name: Part name
        build_style_name: Default build style name for the part
        build_style_description: Default build style description for the part
        build_styles: Owned, ordered build styles
        extras: Optional host-attached metadata, never read by slmio
    """

    mid: int = 0
    top_layer_id: int = 0
    name: str = ""
    build_style_name: str = ""
    build_style_description: str = ""
    build_styles: list[BuildStyle] = field(default_factory=list)
    extras: dict[str, Any] = field(default_factory=dict)

    def set_build_styles(self, build_styles: list[BuildStyle]) -> None:
        """Replace the build styles wholesale.

        Ids are kept as given; the caller is responsible for their uniqueness.

        Args:
            build_styles: New ordered build styles
        """
        self.build_styles = list(build_styles)

    def get_build_style(self, bid: int) -> BuildStyle:
        """Get a build style by id.

        Args:
            bid: Build style id

        Returns:
            The first build style with a matching id

        Raises:
            BuildStyleNotFoundError: If the model has no such build style
        """
        for style in self.build_styles:
            if style.bid == bid:
                return style
        raise BuildStyleNotFoundError(self.mid, bid)

    def has_build_style(self, bid: int) -> bool:
        """Check if the model owns a build style with the given id."""
        return any(style.bid == bid for style in self.build_styles)

    def __len__(self) -> int:
        return len(self.build_styles)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary.

        Returns:
            Dictionary representation of the model and its build styles
        """
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["build_styles"] = [style.to_dict() for style in self.build_styles]
        data["extras"] = dict(self.extras)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Model":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a model

        Returns:
            Model instance
        """
        values = {f.name: data[f.name] for f in fields(cls) if f.name != "extras"}
        values["build_styles"] = [BuildStyle.from_dict(s) for s in values["build_styles"]]
        return cls(**values, extras=dict(data.get("extras", {})))
