"""
Recurring-Revenue Analytics Engine
Centralized Configuration Management

Configuration is loaded with Pydantic settings from environment variables
and an optional .env file. The metrics engine only uses these values as
defaults; every option can be overridden explicitly per run.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MetricsSettings(BaseSettings):
    """Metrics Engine Configuration"""

    model_config = SettingsConfigDict(env_prefix="METRICS_")

    cents_threshold: float = Field(
        default=100_000,
        gt=0,
        description="Bare amounts with an absolute value above this are treated as minor units (cents)",
    )
    cohort_years: int = Field(default=5, ge=1, description="Number of acquisition-year cohorts to report")
    trailing_months: int = Field(default=12, ge=1, description="Length of the monthly time-series window")
    amount_precision: int = Field(default=2, ge=0, description="Decimal places kept on monetary sums")
    default_currency: str = Field(default="usd", description="Currency assumed when the export has none")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, description="Largest accepted upload in bytes")

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currencies are stored as lowercase ISO codes"""
        return v.strip().lower()


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="arr-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
