"""Configuration settings for slmio."""

from pathlib import Path

from pydantic import BaseModel, Field


class ReaderConfig(BaseModel):
    """Configuration for build file readers."""

    lazy_load: bool = Field(
        default=False,
        description="Defer layer geometry until first access instead of reading it during parse",
    )
    default_layer_thickness: float = Field(
        default=0.03,
        gt=0.0,
        le=1.0,
        description="Layer thickness (mm) reported when the file does not define one",
    )


class WriterConfig(BaseModel):
    """Configuration for build file writers."""

    sort_layers: bool = Field(
        default=False,
        description="Emit layers in ascending z (ties by layer id) instead of supplied order",
    )
    staging_suffix: str = Field(
        default=".partial",
        min_length=1,
        description="Suffix of the temporary file output is staged in before commit",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class SlmioSettings(BaseModel):
    """Main application settings."""

    reader: ReaderConfig = Field(default_factory=ReaderConfig)
    writer: WriterConfig = Field(default_factory=WriterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> SlmioSettings:
    """Get default application settings."""
    return SlmioSettings()
