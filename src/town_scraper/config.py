# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to the map URL, browser timings, worker pool size and logging config

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="TOWN_SCRAPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Target map
    map_url: str = Field(default="https://map.ccnetmc.com/nationsmap", description="Web map to scrape towns from")
    output_path: Path = Field(default=Path("towns.json"), description="Where the scraped towns artifact is written")

    # Browser Configuration
    headless: bool = Field(default=True, description="Run the browser without a visible window")
    viewport_width: int = Field(default=1600, ge=1)
    viewport_height: int = Field(default=900, ge=1)

    # Timings (milliseconds)
    page_load_timeout_ms: int = Field(default=60_000, ge=0, description="Navigation timeout for the initial page load")
    map_ready_timeout_ms: int = Field(default=8_000, ge=0, description="How long to wait for the map container")
    settle_ms: int = Field(default=1_500, ge=0, description="Pause after load so map scripts can populate markers")
    click_timeout_ms: int = Field(default=300, ge=0, description="Per-click timeout when revealing a popup")
    popup_settle_ms: int = Field(default=30, ge=0, description="Pause between a click and reading the popup")

    # Marker processing
    click_attempts: int = Field(default=3, ge=1, description="Click attempts per marker before it is skipped")
    concurrency: int = Field(default=16, ge=1, le=64, description="Workers pulling markers from the shared queue")
    max_candidates: int = Field(
        default=10_000, ge=1, description="Upper bound on object-graph candidates considered per run"
    )

    # Logging Configuration
    log_mode: Literal["interactive", "production"] | None = Field(
        default=None, description="Logging output mode (auto-detected when unset)"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")


_config_instance: Config | None = None


def get_config() -> Config:
    """Return the process-wide config, reading the environment on first use."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Re-read the environment (and .env) into a new process-wide config.

    Tests call this after changing TOWN_SCRAPER_* variables.
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance
