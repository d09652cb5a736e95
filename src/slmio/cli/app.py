"""CLI application entry point for slmio.

This module provides the main CLI interface using Typer. A mode name selects
the registered Reader/Writer pair used for a file.
"""

import time
from pathlib import Path
from typing import Annotated

import typer

from slmio import __version__
from slmio.cli.output import (
    console,
    print_aggregates,
    print_document_info,
    print_error,
    print_file_info,
    print_formats,
    print_header,
    print_step,
    print_success,
)
from slmio.config import LoggingConfig, ReaderConfig, SlmioSettings, WriterConfig
from slmio.exceptions import EmptyLayerSetError, SlmError, UnknownFormatError
from slmio.io import UNBUNDLED_FORMATS, Reader, registry
from slmio.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="slmio",
    help="Inspect and convert laser powder-bed build files.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]slmio[/bold blue] v{__version__}")
        raise typer.Exit()


def _error_details(error: SlmError) -> str | None:
    """Extra hint for errors a user can act on."""
    if isinstance(error, UnknownFormatError):
        description = UNBUNDLED_FORMATS.get(error.name.lower())
        if description is not None:
            return (
                f"'{error.name.lower()}' ({description}) has no bundled reader/writer; "
                "register one with slmio.io.register_format()"
            )
    return None


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Inspect and convert laser powder-bed build files."""


@app.command()
def convert(
    mode: Annotated[
        str,
        typer.Argument(help="Format of the input file (see 'slmio formats')", show_default=False),
    ],
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the input build file", show_default=False),
    ],
    output: Annotated[
        Path | None,
        typer.Argument(help="Output path (default: {name}-converted.{ext})"),
    ] = None,
    to_mode: Annotated[
        str | None,
        typer.Option("--to", "-t", help="Format of the output file (default: same as input)"),
    ] = None,
    sort_layers: Annotated[
        bool,
        typer.Option("--sort-layers", "-s", help="Write layers in ascending z order"),
    ] = False,
    lazy: Annotated[
        bool,
        typer.Option("--lazy", help="Read layer geometry on demand instead of up front"),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Write detailed logs to file"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Logging level (DEBUG|INFO|WARNING|ERROR)"),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Minimal console output"),
    ] = False,
) -> None:
    """Read a build file with one format and write it with another (or the same).

    Example:
        slmio convert slmb build.slmb --sort-layers

    This will create build-converted.slmb with layers in ascending z order.
    """
    settings = SlmioSettings(
        reader=ReaderConfig(lazy_load=lazy),
        writer=WriterConfig(sort_layers=sort_layers),
        logging=LoggingConfig(log_file=log_file, log_level=log_level),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)

    start = time.time()
    try:
        source = registry.get(mode)
        target = registry.get(to_mode or mode)

        if output is None:
            output = input_file.parent / f"{input_file.stem}-converted{target.extension}"

        if not quiet:
            print_step("Reading")

        reader = source.reader_cls(input_file, config=settings.reader)
        reader.parse()

        if not quiet:
            print_file_info(str(input_file), source.name, reader.get_file_size())
            print_document_info(
                reader.header,
                list(reader.models),
                len(reader.layers),
                reader.get_layer_thickness(),
            )
            print_step("Writing")

        writer = target.writer_cls(output, config=settings.writer)
        writer.write(reader.header, reader.models, reader.layers)
    except SlmError as e:
        print_error(str(e), _error_details(e))
        raise typer.Exit(code=1)

    if not quiet:
        print_success(
            output_path=str(output),
            size=writer.stats.bytes_transferred,
            total_time_s=time.time() - start,
            layers=writer.stats.layer_count,
            models=writer.stats.model_count,
            geometry=writer.stats.geometry_count,
        )


@app.command()
def info(
    input_file: Annotated[
        Path,
        typer.Argument(help="Path to the build file", show_default=False),
    ],
    format_name: Annotated[
        str,
        typer.Option("--format", "-f", help="Format of the build file"),
    ] = "slmb",
) -> None:
    """Show the header, parts and geometry statistics of a build file."""
    try:
        spec = registry.get(format_name)
        reader: Reader = spec.reader_cls(input_file)
        reader.parse()

        print_file_info(str(input_file), spec.name, reader.get_file_size())
        print_document_info(
            reader.header,
            list(reader.models),
            len(reader.layers),
            reader.get_layer_thickness(),
        )

        # Aggregates are defined on the format's writer
        aggregator = spec.writer_cls()
        layers = reader.layers
        z_range = aggregator.get_layer_min_max(layers) if layers else None
        try:
            bbox = aggregator.get_bounding_box(layers)
        except EmptyLayerSetError:
            bbox = None

        print_aggregates(
            z_range=z_range,
            hatches=aggregator.get_total_num_hatches(layers),
            contours=aggregator.get_total_num_contours(layers),
            bbox=bbox,
        )
    except SlmError as e:
        print_error(str(e), _error_details(e))
        raise typer.Exit(code=1)


@app.command()
def formats() -> None:
    """List the registered build file formats."""
    unbundled = {
        name: description
        for name, description in UNBUNDLED_FORMATS.items()
        if name not in registry
    }
    print_formats([registry.get(name) for name in registry.names()], unbundled)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
