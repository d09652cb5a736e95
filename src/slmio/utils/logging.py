"""Logging utilities for slmio."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import structlog


@dataclass
class TransferStats:
    """Statistics from reading or writing one build file."""

    model_count: int = 0
    layer_count: int = 0
    deferred_layers: int = 0
    hydrated_layers: int = 0
    geometry_count: int = 0
    bytes_transferred: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate transfer duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.ERROR if quiet else getattr(logging, console_level.upper()))
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("slmio")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=file_level,
    )

    return logger


class DocumentLogger:
    """Logger for tracking build file transfers and their statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger if logger is not None else structlog.get_logger("slmio")
        self._stats = TransferStats()

    def reset(self) -> None:
        """Start a fresh set of statistics."""
        self._stats = TransferStats()

    def log_parse_start(self, path: str, size: int) -> None:
        """Log start of parsing."""
        self._logger.debug("Parsing build file", path=path, size=size)
        self._stats.start_time = time.time()
        self._stats.bytes_transferred = size

    def log_parse_complete(
        self,
        path: str,
        model_count: int,
        layer_count: int,
        deferred_layers: int,
        geometry_count: int,
    ) -> None:
        """Log successful parse."""
        self._logger.info(
            "Build file parsed",
            path=path,
            models=model_count,
            layers=layer_count,
            deferred=deferred_layers,
            geometry=geometry_count,
        )
        self._stats.model_count = model_count
        self._stats.layer_count = layer_count
        self._stats.deferred_layers = deferred_layers
        self._stats.end_time = time.time()
        self._stats.geometry_count = geometry_count

    def log_layer_hydrated(self, layer_id: int, position: int, geometry_count: int) -> None:
        """Log deferred layer geometry being loaded."""
        self._logger.debug(
            "Layer hydrated",
            layer_id=layer_id,
            position=position,
            geometry=geometry_count,
        )
        self._stats.hydrated_layers += 1
        self._stats.geometry_count += geometry_count

    def log_write_start(self, path: str, layer_count: int) -> None:
        """Log start of writing."""
        self._logger.debug("Writing build file", path=path, layers=layer_count)
        self._stats.start_time = time.time()

    def log_write_complete(
        self,
        path: str,
        model_count: int,
        layer_count: int,
        geometry_count: int,
        size: int,
    ) -> None:
        """Log successful write."""
        self._logger.info(
            "Build file written",
            path=path,
            models=model_count,
            layers=layer_count,
            geometry=geometry_count,
            size=size,
        )
        self._stats.model_count = model_count
        self._stats.layer_count = layer_count
        self._stats.geometry_count = geometry_count
        self._stats.end_time = time.time()
        self._stats.bytes_transferred = size

    def log_error(self, path: str, error: Exception) -> None:
        """Log a failed parse, hydration or write."""
        self._logger.error(
            "Build file transfer failed",
            path=path,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._stats.errors.append((path, str(error)))

    @property
    def stats(self) -> TransferStats:
        """Get current transfer statistics."""
        return self._stats
