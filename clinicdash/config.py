"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

SAMPLE_DATA_FILE = Path(__file__).parent / "adapters" / "sample_clinic_data.json"


class DashboardConfig(BaseModel):
    """Settings for the dashboard computation."""
    top_doctors_limit: int = 10
    rolling_window_days: int = 10
    default_range_days: int = 30

    @field_validator("top_doctors_limit", "rolling_window_days", "default_range_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "America/Sao_Paulo"
    data_file: Optional[Path] = None
    default_clinic_id: Optional[str] = None
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA identifier."""
        try:
            pendulum.timezone(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    def get_data_file(self) -> Path:
        """Return the configured data file, or the bundled sample data."""
        return self.data_file or SAMPLE_DATA_FILE

    def resolve_clinic_id(self, clinic_id: Optional[str]) -> str:
        """
        Pick the clinic to report on.

        Raises:
            ValueError: If neither an explicit nor a default clinic is set
        """
        resolved = clinic_id or self.default_clinic_id
        if not resolved:
            raise ValueError(
                "No clinic given. Pass --clinic or set default_clinic_id in the config file."
            )
        return resolved

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

        return cls(**data)


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


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load the given config file, falling back to defaults when none exists."""
    path = config_path or get_default_config_path()
    if config_path is None and not path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(path)
