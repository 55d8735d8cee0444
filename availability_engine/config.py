"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import date
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidTimezone
from .domain.validation import MIN_OVERLAP_RANGE, SLOT_DURATION_RANGE, validate_timezone


class DefaultsConfig(BaseModel):
    """Default settings for queries."""
    slot_duration_minutes: int = 60
    min_overlap_minutes: int = 60

    @field_validator("slot_duration_minutes")
    @classmethod
    def validate_slot_duration(cls, value: int) -> int:
        """Ensure slot duration lies within 15-480 minutes."""
        low, high = SLOT_DURATION_RANGE
        if not low <= value <= high:
            raise ValueError(f"slot_duration_minutes must be between {low} and {high}, got {value}")
        return value

    @field_validator("min_overlap_minutes")
    @classmethod
    def validate_min_overlap(cls, value: int) -> int:
        """Ensure the match threshold lies within 15-1440 minutes."""
        low, high = MIN_OVERLAP_RANGE
        if not low <= value <= high:
            raise ValueError(f"min_overlap_minutes must be between {low} and {high}, got {value}")
        return value


class StoreConfig(BaseModel):
    """Where slot data comes from."""
    backend: Literal["file", "http"] = "file"
    data_file: Optional[Path] = None  # Defaults to the bundled sample data
    base_url: str = ""
    api_token: Optional[str] = None
    timeout_seconds: float = 10.0

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_backend_settings(self) -> "StoreConfig":
        """Ensure the HTTP backend has somewhere to talk to."""
        if self.backend == "http" and not self.base_url:
            raise ValueError("base_url is required when backend is 'http'")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    store: StoreConfig = Field(default_factory=StoreConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    display_timezone: Optional[str] = None
    reference_date: Optional[date] = None  # Fixes the week used for timezone offsets

    @field_validator("display_timezone")
    @classmethod
    def validate_display_timezone(cls, value: Optional[str]) -> Optional[str]:
        """Ensure the display timezone is a known IANA zone."""
        if value is None:
            return value
        try:
            return validate_timezone(value)
        except InvalidTimezone as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative data files are resolved against the config file location
        if config.store.data_file is not None and not config.store.data_file.is_absolute():
            config.store.data_file = (config_path.parent / config.store.data_file).resolve()

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
