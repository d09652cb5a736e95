"""Exception hierarchy for slmio."""


class SlmError(Exception):
    """Base exception for all slmio errors."""

    pass


class FileAccessError(SlmError):
    """Errors opening, reading or writing a build file."""

    pass


class FileLoadError(FileAccessError):
    """Error reading a build file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read build file '{path}': {reason}")


class FileSaveError(FileAccessError):
    """Error writing a build file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write build file '{path}': {reason}")


class FileFormatError(SlmError):
    """Malformed or unsupported binary structure."""

    def __init__(self, path: str, details: str, offset: int | None = None) -> None:
        self.path = path
        self.details = details
        self.offset = offset
        location = f" at byte {offset}" if offset is not None else ""
        super().__init__(f"Invalid build file format '{path}'{location}: {details}")


class DocumentValidationError(SlmError):
    """Document violates a referential or structural invariant.

    Attributes:
        field: Name of the offending field, if any
        mid: Offending model id, if any
        bid: Offending build style id, if any
        layer_id: Id of the layer holding the offending geometry, if any
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        mid: int | None = None,
        bid: int | None = None,
        layer_id: int | None = None,
    ) -> None:
        self.field = field
        self.mid = mid
        self.bid = bid
        self.layer_id = layer_id
        super().__init__(message)


class EmptyLayerSetError(DocumentValidationError):
    """An aggregate was requested over a layer set with nothing in it."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot compute {operation}: layer set is empty", field="layers")


class EntityNotFoundError(SlmError, LookupError):
    """A lookup by id or name found nothing."""

    pass


class ModelNotFoundError(EntityNotFoundError):
    """Requested model not found in the document."""

    def __init__(self, mid: int) -> None:
        self.mid = mid
        super().__init__(f"Model with mid={mid} not found")


class BuildStyleNotFoundError(EntityNotFoundError):
    """Requested build style not found in a model."""

    def __init__(self, mid: int, bid: int) -> None:
        self.mid = mid
        self.bid = bid
        super().__init__(f"BuildStyle with bid={bid} not found in model mid={mid}")


class UnknownFormatError(EntityNotFoundError):
    """No reader/writer pair registered under the requested name."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(
            f"Unknown format '{name}'. Available formats: {', '.join(available) or 'none'}"
        )


class SnapshotError(SlmError):
    """Snapshot data cannot be restored."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid snapshot: {reason}")
