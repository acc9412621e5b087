"""Application settings and configuration management.

This file implements a centralized configuration system using Pydantic Settings.
It handles environment variables, default values, and configuration validation
for the season engine, the CLI and the HTTP API.

Key Benefits:
- Type safety: All settings have defined types with validation
- Environment integration: Automatically loads from .env files
- One place to change how seasons are named and when they go stale

For beginners:

Pydantic Settings: A Python library that automatically validates configuration
and loads values from environment variables, .env files, and defaults.

Environment Variables: System variables that configure applications without
changing code. Example: DATABASE_URL=sqlite:///mydb.db
"""

from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    Configuration Sources (in priority order):
    1. Environment variables (highest priority)
    2. .env file values
    3. Default values defined here (lowest priority)

    Example Usage:
    - In code: `settings.database_url`
    - Environment variable: `DATABASE_URL=sqlite:///prod.db`
    - .env file: `fall_start_month=8`
    """

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file in project root
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow DATABASE_URL or database_url
    )

    # API Configuration - FastAPI web server settings
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Database Configuration - SQLAlchemy connection settings
    database_url: str = "sqlite:///data/database/seasonbook.db"
    database_pool_size: int = 5  # Ignored for SQLite
    database_echo: bool = False  # Log all SQL queries

    # Season Configuration
    default_sport: Literal["baseball", "softball"] = "baseball"
    fall_start_month: int = 7  # Months before this are "Spring", this one onwards "Fall"
    season_stale_after_days: int = 183  # Active seasons older than this get a nudge to end

    # Background work
    migration_workers: int = 1  # Threads used by MigrationRunner

    # Logging Configuration
    log_level: str = "INFO"
    log_file: Path = Path("data/logs/seasonbook.log")

    @field_validator("fall_start_month")
    @classmethod
    def _check_fall_start_month(cls, value: int) -> int:
        # Month 1 would leave no room for a Spring half
        if not 2 <= value <= 12:
            raise ValueError(f"fall_start_month must be between 2 and 12, got {value}")
        return value

    @property
    def project_root(self) -> Path:
        """Get the project root directory.

        seasonbook/config/settings.py -> seasonbook/config -> seasonbook -> project_root
        """
        return Path(__file__).parent.parent.parent

    @property
    def data_dir(self) -> Path:
        """Directory for the SQLite database file and logs."""
        return self.project_root / "data"


# Global settings instance - import it as `from seasonbook.config import settings`
settings = Settings()
