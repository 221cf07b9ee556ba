"""Configuration models describing Tractor settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tif", ".tiff", ".webp"]
DEFAULT_IMAGE_FORMATS = ["JPEG", "PNG", "GIF", "BMP", "TIFF", "WEBP"]


class TractorBaseModel(BaseModel):
    """Shared configuration for Tractor Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(TractorBaseModel):
    """Location and layout of storage resources.

    Attributes:
        root: Directory that holds one subdirectory per named resource.
        default_resource: Resource used when the CLI is not given one.
        index_filename: Name of the per-resource index file.
    """

    root: str = "~/.tractor/storage"
    default_resource: str = "import"
    index_filename: str = "index.json"


class FormatSettings(TractorBaseModel):
    """Rules deciding which files a resource accepts.

    Attributes:
        extensions: Lower-case file suffixes that may be imported.
        image_formats: Pillow format names accepted when sniffing content.
        sniff_content: Whether to confirm the file signature with Pillow.
    """

    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_IMAGE_EXTENSIONS))
    image_formats: List[str] = Field(default_factory=lambda: list(DEFAULT_IMAGE_FORMATS))
    sniff_content: bool = True

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: List[str]) -> List[str]:
        normalized = []
        for item in value:
            suffix = item.strip().lower()
            if not suffix:
                continue
            if not suffix.startswith("."):
                suffix = f".{suffix}"
            normalized.append(suffix)
        return normalized

    @field_validator("image_formats")
    @classmethod
    def _normalize_formats(cls, value: List[str]) -> List[str]:
        return [item.strip().upper() for item in value if item.strip()]


class HashingSettings(TractorBaseModel):
    """Content digest settings used for deduplication.

    Attributes:
        chunk_size_kb: Read size used while streaming file contents.
    """

    chunk_size_kb: int = Field(default=1024, gt=0)


class LoggingSettings(TractorBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(TractorBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class TractorConfig(TractorBaseModel):
    """Top-level configuration struct for Tractor.

    Attributes:
        storage: Storage resource location settings.
        formats: Format acceptance rules.
        hashing: Content digest settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    formats: FormatSettings = Field(default_factory=FormatSettings)
    hashing: HashingSettings = Field(default_factory=HashingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "TractorBaseModel",
    "StorageSettings",
    "FormatSettings",
    "HashingSettings",
    "LoggingSettings",
    "CLIOptions",
    "TractorConfig",
]
