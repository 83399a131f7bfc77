"""
Shared configuration management for the JWKS Aggregator.
"""

from typing import Dict

from apscheduler.triggers.cron import CronTrigger
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceSettings(BaseModel):
    """Configured upstream key-set publisher."""

    name: str
    url: str


DEFAULT_SOURCES: Dict[str, SourceSettings] = {
    "google": SourceSettings(
        name="google-jwks-api",
        url="https://www.googleapis.com/oauth2/v3/certs",
    ),
    "microsoft": SourceSettings(
        name="microsoft-jwks-api",
        url="https://login.microsoftonline.com/common/discovery/v2.0/keys",
    ),
}


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="JWKS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Refresh cycle
    refresh_schedule: str = Field(default="* * * * *")
    refresh_on_startup: bool = Field(default=True)
    http_timeout: float = Field(default=10.0, gt=0)

    # Upstream publishers, JSON encoded when set through JWKS_SOURCES
    sources: Dict[str, SourceSettings] = Field(
        default_factory=lambda: dict(DEFAULT_SOURCES)
    )

    @field_validator("refresh_schedule")
    @classmethod
    def _validate_schedule(cls, value: str) -> str:
        CronTrigger.from_crontab(value)
        return value


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
