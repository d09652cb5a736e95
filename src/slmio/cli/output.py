"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with formatted document summaries and messages.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from slmio.domain import Header, Model
from slmio.io import BoundingBox, FormatSpec

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]slmio[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_file_info(path: str, format_name: str, size: int) -> None:
    """Print build file information.

    Args:
        path: Path to the build file
        format_name: Registered format name
        size: File size in bytes
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(path)
    line.append(f" ({format_name}, {_format_size(size)})")
    console.print(line)


def print_document_info(
    header: Header,
    models: list[Model],
    layer_count: int,
    layer_thickness: float,
) -> None:
    """Print header fields and part summary.

    Args:
        header: Parsed file header
        models: Parsed models
        layer_count: Number of layers
        layer_thickness: Nominal layer thickness (mm)
    """
    major, minor = header.version
    name = Text("  ")
    name.append(header.file_name or "(unnamed)", style="bold")
    name.append(f" v{major}.{minor}")
    if header.creator:
        name.append(f" {SYM_DOT} {header.creator}")
    console.print(name)
    console.print(
        f"  {layer_count:,} layers {SYM_DOT} {len(models)} models {SYM_DOT} "
        f"z unit {header.z_unit} {SYM_DOT} {layer_thickness:g} mm layer thickness"
    )
    for model in models:
        console.print(
            f"    mid {model.mid}: {model.name or '(unnamed)'} "
            f"{SYM_DOT} {len(model)} build styles {SYM_DOT} top layer {model.top_layer_id}"
        )


def print_aggregates(
    z_range: tuple[float, float] | None,
    hatches: int,
    contours: int,
    bbox: BoundingBox | None,
) -> None:
    """Print aggregate geometry statistics.

    Args:
        z_range: (min, max) layer z, or None for an empty build
        hatches: Total hatch segment count
        contours: Total contour count
        bbox: Bounding box, or None if the build has no coordinates
    """
    console.print(f"  {hatches:,} hatch vectors {SYM_DOT} {contours:,} contours")
    if z_range is not None:
        console.print(f"  z {z_range[0]} – {z_range[1]}")
    if bbox is not None:
        console.print(
            f"  x {bbox.min_x:g} – {bbox.max_x:g} {SYM_DOT} y {bbox.min_y:g} – {bbox.max_y:g}"
        )


def print_formats(formats: list[FormatSpec], unbundled: dict[str, str] | None = None) -> None:
    """Print the registered formats as a table.

    Args:
        formats: Registered format specs
        unbundled: Known machine formats without a registered reader/writer,
            mode name to description
    """
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Mode")
    table.add_column("Extension")
    table.add_column("Description")
    for spec in formats:
        table.add_row(spec.name, spec.extension, spec.description)
    for name, description in (unbundled or {}).items():
        table.add_row(name, "", f"{description} (not bundled)", style="dim")
    console.print(table)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def _format_size(size_bytes: int) -> str:
    """Format a byte count in human-readable form."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def print_success(
    output_path: str,
    size: int,
    total_time_s: float,
    layers: int,
    models: int,
    geometry: int,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        size: Output size in bytes
        total_time_s: Total time in seconds
        layers: Number of layers written
        models: Number of models written
        geometry: Number of geometry items written
    """
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(total_time_s)}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({_format_size(size)})")
    console.print(line)

    console.print(
        f"  {layers:,} layers {SYM_DOT} {models} models {SYM_DOT} {geometry:,} geometry items"
    )


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
