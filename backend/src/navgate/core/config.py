"""Configuration management for navgate.

Uses Pydantic Settings for type-safe, environment-based configuration.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    app_name: str = Field("navgate", alias="NAVGATE_APP_NAME")
    environment: str = Field("development", alias="NAVGATE_ENVIRONMENT")

    # Logging configuration
    log_level: str = Field("INFO", alias="NAVGATE_LOG_LEVEL")
    log_format: str = Field("text", alias="NAVGATE_LOG_FORMAT")  # text or json

    # Plugin discovery
    plugins_root: str = Field("./plugins", alias="NAVGATE_PLUGINS_ROOT")
    # Safe mode boots with every plugin disabled
    safe_mode: bool = Field(False, alias="NAVGATE_SAFE_MODE")

    # Boot-time navigation verification
    nav_validation_powerset_max_caps: int = Field(8, alias="NAVGATE_NAV_VALIDATION_POWERSET_MAX_CAPS")
    nav_validation_max_pair_combinations: int = Field(512, alias="NAVGATE_NAV_VALIDATION_MAX_PAIR_COMBINATIONS")
    # Comma-separated subscription tier levels covered by boot verification
    nav_validation_tier_levels_csv: str = Field("0,1", alias="NAVGATE_NAV_VALIDATION_TIER_LEVELS")
    nav_validation_fail_fast: bool = Field(False, alias="NAVGATE_NAV_VALIDATION_FAIL_FAST")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def nav_validation_tier_levels(self) -> list[int]:
        """Tier levels parsed from the comma-separated setting."""
        return [int(part.strip()) for part in self.nav_validation_tier_levels_csv.split(",") if part.strip()]

    @field_validator("plugins_root", mode="before")
    @classmethod
    def _resolve_plugins_root(cls, v: str) -> str:
        try:
            p = Path(v)
            if p.is_absolute():
                return str(p)
            return str(p.resolve())
        except Exception:
            return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["text", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment setting."""
        valid_environments = ["development", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("nav_validation_powerset_max_caps", "nav_validation_max_pair_combinations")
    @classmethod
    def validate_positive_cap(cls, v: int) -> int:
        """Generator caps must be positive integers."""
        if v <= 0:
            raise ValueError("Navigation validation caps must be positive")
        return v

    @field_validator("nav_validation_tier_levels_csv", mode="before")
    @classmethod
    def validate_tier_levels(cls, v: str | list | int | None) -> str:
        """Accept a comma-separated string or a list of tier levels."""
        if v is None:
            return "0"
        if isinstance(v, int):
            return str(v)
        if isinstance(v, (list, tuple)):
            v = ",".join(str(part) for part in v)
        parts = [part.strip() for part in str(v).split(",") if part.strip()]
        for part in parts:
            if not part.lstrip("-").isdigit():
                raise ValueError(f"Tier levels must be integers, got '{part}'")
        return ",".join(parts) or "0"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Build a fresh settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance - will be created when first accessed
settings: Settings | None = None


def get_settings_instance() -> Settings:
    """Return the process-wide settings, creating them on first access."""
    global settings  # noqa: PLW0603
    if settings is None:
        settings = get_settings()
    return settings


def reset_settings_instance() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global settings  # noqa: PLW0603
    settings = None
