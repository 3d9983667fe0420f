"""
Survey Analytics - Configuration.

Environment-based configuration for the survey service, record store,
aggregation fan-out and export surface.

Architecture Layer: Infrastructure
Principles: 12-Factor App, Configuration Externalization, Type Safety
"""
from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import structlog

logger = structlog.get_logger(__name__)


class Environment(str, Enum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ServiceConfiguration(BaseSettings):
    """Core service configuration."""
    name: str = Field(default="survey-analytics")
    version: str = Field(default="1.0.0")
    env: Environment = Field(default=Environment.DEVELOPMENT)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8010, ge=1, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    debug: bool = Field(default=False)
    cors_origins: str = Field(default="*")

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_SERVICE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class RecordStoreConfig(BaseSettings):
    """Hosted record store (PostgREST) configuration. Empty URL selects the in-memory store."""
    url: str = Field(default="")
    api_key: str = Field(default="")
    schema_path: str = Field(default="/rest/v1")
    timeout_seconds: float = Field(default=10.0, ge=0.5, le=120.0)
    verify_ssl: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_STORE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.url)


class AggregationConfig(BaseSettings):
    """Dashboard aggregation configuration."""
    fetch_timeout_seconds: float = Field(default=15.0, ge=0.1, le=300.0)
    recent_activity_limit: int = Field(default=10, ge=1, le=100)
    trend_up_threshold: float = Field(default=60.0, ge=0.0, le=100.0)
    trend_down_threshold: float = Field(default=40.0, ge=0.0, le=100.0)

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_AGGREGATION_",
        env_file=".env",
        extra="ignore",
    )


class ExportConfig(BaseSettings):
    """Raw data export configuration."""
    formats: list[str] = Field(default_factory=lambda: ["csv", "json"])
    include_metadata: bool = Field(default=False)
    exported_by: str = Field(default="Admin Panel")

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_EXPORT_",
        env_file=".env",
        extra="ignore",
    )


class SecurityConfig(BaseSettings):
    """Admin identity configuration. Bearer tokens are JWTs from the hosted auth service."""
    jwt_secret: str = Field(default="")
    jwt_algorithm: str = Field(default="HS256")
    jwt_audience: str = Field(default="authenticated")
    jwt_issuer: str = Field(default="")
    role_claim: str = Field(default="app_metadata.role")
    admin_roles: list[str] = Field(default_factory=lambda: ["admin"])
    clock_skew_seconds: int = Field(default=30, ge=0, le=300)

    model_config = SettingsConfigDict(
        env_prefix="SURVEY_SECURITY_",
        env_file=".env",
        extra="ignore",
    )


class SurveyServiceConfig(BaseSettings):
    """Aggregate survey service configuration."""
    service: ServiceConfiguration = Field(default_factory=ServiceConfiguration)
    store: RecordStoreConfig = Field(default_factory=RecordStoreConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @staticmethod
    def load() -> SurveyServiceConfig:
        """Load configuration from environment."""
        config = SurveyServiceConfig()
        logger.info(
            "survey_config_loaded",
            service=config.service.name,
            env=config.service.env.value,
            remote_store=config.store.enabled,
            admin_configured=bool(config.security.jwt_secret),
        )
        return config

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.service.env == Environment.PRODUCTION


_config: SurveyServiceConfig | None = None


def get_config() -> SurveyServiceConfig:
    """Get singleton configuration instance."""
    global _config
    if _config is None:
        _config = SurveyServiceConfig.load()
    return _config


def reset_config() -> None:
    """Reset configuration (useful for testing)."""
    global _config
    _config = None
