"""Configuration models for flipscan."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from flipscan.errors import ConfigError

# Config file stays at project root (user-editable)
CONFIG_FILE = ".flipscan.toml"

DEFAULT_EXTENSIONS = [".ts", ".js", ".html"]


class AnalyzerConfig(BaseModel):
    """File change analyzer configuration."""

    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File extensions analyzed in a diff (source and template files)",
    )
    context_radius: int = Field(
        default=50,
        ge=0,
        description="Characters of context captured on each side of a match",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        description="Files analyzed concurrently within one diff (1 = sequential)",
    )

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return normalized


class CacheConfig(BaseModel):
    """Result cache configuration."""

    enabled: bool = Field(
        default=True,
        description="Enable in-memory caching of analysis results",
    )
    max_entries: int = Field(
        default=0,
        ge=0,
        description="Maximum cached results (0 = unbounded)",
    )


class OutputConfig(BaseModel):
    """Output configuration."""

    format: Literal["text", "json", "markdown"] = Field(
        default="text",
        description="Default report format",
    )
    color: bool = Field(
        default=True,
        description="Use ANSI colors in text output",
    )


class FlipscanConfig(BaseSettings):
    """Main flipscan configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FLIPSCAN_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    version: str = Field(default="1.0", description="Config version")
    analyzer: AnalyzerConfig = Field(default_factory=AnalyzerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over values read from a config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load(cls, config_path: Path | None = None) -> FlipscanConfig:
        """Load configuration from file and environment.

        Resolution order (highest to lowest priority):
        1. Environment variables (FLIPSCAN_ANALYZER__MAX_WORKERS=8)
        2. Provided config file path
        3. .flipscan.toml in current directory
        4. .flipscan.toml in home directory
        5. Built-in defaults

        Raises:
            ConfigError: If the config file is not valid TOML or fails validation
        """
        config_data: dict[str, Any] = {}

        locations = []
        if config_path:
            locations.append(config_path)
        locations.extend(
            [
                Path.cwd() / CONFIG_FILE,
                Path.home() / CONFIG_FILE,
            ]
        )

        for loc in locations:
            if loc.exists():
                try:
                    with open(loc, "rb") as f:
                        config_data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid TOML in {loc}: {e}", path=str(loc)) from e
                break

        # [flipscan] holds top-level keys
        top_level = config_data.pop("flipscan", {})
        config_data.update(top_level)

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e


def get_default_config_toml() -> str:
    """Generate default .flipscan.toml content."""
    extensions = ", ".join(f'"{ext}"' for ext in DEFAULT_EXTENSIONS)
    return f"""# flipscan configuration

[flipscan]
version = "1.0"

[analyzer]
# Only files with these extensions are analyzed in a diff
extensions = [{extensions}]
context_radius = 50  # Characters of context around each detection
max_workers = 4  # Files analyzed concurrently (1 = sequential)

[cache]
enabled = true
max_entries = 0  # 0 = unbounded; cleared on file changes

[output]
format = "text"  # text | json | markdown
color = true
"""
