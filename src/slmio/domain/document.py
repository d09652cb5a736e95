"""Build document and versioned snapshots.

A BuildDocument groups the header, models and layers of one build. It owns
both sets; entities inside it do not outlive it.

Snapshots are plain dictionaries with named fields, stamped with
SNAPSHOT_VERSION, so they can be stored as JSON or passed between processes.
"""

from dataclasses import dataclass, field
from typing import Any

from slmio.domain.header import Header
from slmio.domain.layer import Layer
from slmio.domain.model import Model
from slmio.exceptions import ModelNotFoundError, SnapshotError

SNAPSHOT_VERSION = 1


@dataclass
class BuildDocument:
    """The full contents of a build file.

    Attributes:
        header: File-level metadata
        models: Parts and their build styles
        layers: Height slices and their geometry
    """

    header: Header = field(default_factory=Header)
    models: list[Model] = field(default_factory=list)
    layers: list[Layer] = field(default_factory=list)

    def get_model(self, mid: int) -> Model:
        """Get a model by id.

        Raises:
            ModelNotFoundError: If no model has the given id
        """
        for model in self.models:
            if model.mid == mid:
                return model
        raise ModelNotFoundError(mid)

    def geometry_count(self) -> int:
        """Count geometry items across all loaded layers."""
        return sum(len(layer) for layer in self.layers if layer.is_loaded())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a versioned snapshot.

        Deferred layers are hydrated so the snapshot is complete.

        Returns:
            Dictionary representation of the document
        """
        return {
            "snapshot_version": SNAPSHOT_VERSION,
            "header": self.header.to_dict(),
            "models": [model.to_dict() for model in self.models],
            "layers": [layer.to_dict() for layer in self.layers],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildDocument":
        """Restore a document from a snapshot.

        Args:
            data: Snapshot produced by to_dict()

        Returns:
            BuildDocument instance

        Raises:
            SnapshotError: If the snapshot version is missing or unsupported,
                or a required field is absent or malformed
        """
        version = data.get("snapshot_version")
        if version != SNAPSHOT_VERSION:
            raise SnapshotError(
                f"unsupported snapshot version {version!r} (expected {SNAPSHOT_VERSION})"
            )

        try:
            return cls(
                header=Header.from_dict(data["header"]),
                models=[Model.from_dict(m) for m in data["models"]],
                layers=[Layer.from_dict(layer) for layer in data["layers"]],
            )
        except KeyError as e:
            raise SnapshotError(f"missing field {e.args[0]!r}") from e
        except (ValueError, TypeError) as e:
            raise SnapshotError(f"malformed field value: {e}") from e
