"""
Cargomon Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class WatcherSettings(BaseSettings):
    """File watcher configuration settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    root_path: Path = Field(default=Path("."), description="Directory tree to watch")
    debounce_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    recursive: bool = Field(default=True)

    ignore_patterns: list[str] = Field(
        default=[
            ".git",
            "*.swp",
            "*.swx",
            "*~",
            ".#*",
        ],
        description="Glob patterns matched against path components to ignore",
    )

    @field_validator("ignore_patterns", mode="before")
    @classmethod
    def parse_ignore_patterns(cls, v: str | list[str]) -> list[str]:
        """Parse ignore patterns from comma-separated string or list."""
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class BuildSettings(BaseSettings):
    """Build tool invocation settings."""

    model_config = SettingsConfigDict(env_prefix="BUILD_")

    command: str = Field(default="cargo", description="Build tool executable")
    subcommand: str = Field(default="build")
    manifest_name: str = Field(default="Cargo.toml")
    output_dir: str = Field(default="target", description="Build output root")
    profile_dir: str = Field(default="debug")
    timeout_seconds: float | None = Field(default=None, gt=0.0)


class RunSettings(BaseSettings):
    """Built program invocation settings."""

    model_config = SettingsConfigDict(env_prefix="RUN_")

    timeout_seconds: float | None = Field(default=None, gt=0.0)


class OutputSettings(BaseSettings):
    """Terminal output settings."""

    model_config = SettingsConfigDict(env_prefix="OUTPUT_")

    color: bool = Field(default=True)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: LogLevel = Field(default="WARNING")
    format: str = Field(default="console")  # "json" or "console"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Accept level names in any case."""
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Cargomon")
    app_version: str = Field(default="0.1.0")

    # Sub-settings
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    build: BuildSettings = Field(default_factory=BuildSettings)
    run: RunSettings = Field(default_factory=RunSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    """
    return Settings()


@dataclass(frozen=True)
class WatchConfig:
    """
    Resolved configuration for one watch session.

    Immutable once the control loop starts.
    """

    root_path: Path
    debounce_interval: float
    project_root: Path

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        root_path: Path | None = None,
        debounce_interval: float | None = None,
        project_root: Path | None = None,
    ) -> "WatchConfig":
        """
        Build a config from settings, letting explicit values win.

        Args:
            settings: Application settings
            root_path: Directory to watch (overrides settings)
            debounce_interval: Debounce window in seconds (overrides settings)
            project_root: Directory holding the manifest, defaults to root_path

        Returns:
            Resolved WatchConfig
        """
        root = root_path if root_path is not None else settings.watcher.root_path
        interval = (
            debounce_interval
            if debounce_interval is not None
            else settings.watcher.debounce_seconds
        )
        if interval < 0:
            raise ValueError(f"debounce interval must be >= 0, got {interval}")

        # Children run with cwd=project_root, so relative roots must not leak
        root = Path(root).resolve()
        return cls(
            root_path=root,
            debounce_interval=float(interval),
            project_root=Path(project_root).resolve() if project_root is not None else root,
        )
