"""Application configuration using Pydantic settings."""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecuritySettings(BaseModel):
    shared_secret: str = Field(default="", description="Pre-shared secret expected on inbound tasks")


class GitHubSettings(BaseModel):
    token: str = Field(default="", description="Token used for repository and Pages calls")
    owner: str = Field(default="", description="Account that owns generated repositories")
    api_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    pages_branch: str = "main"
    pages_path: str = "/"
    timeout_s: float = 30.0


class GenerationSettings(BaseModel):
    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible chat completion API",
    )
    api_key: str = Field(default="", description="API key for the generation service")
    model: str = "gpt-4o"
    timeout_s: float = 300.0


class PipelineTuning(BaseModel):
    report_max_attempts: int = Field(default=5, ge=1)
    report_initial_delay_s: float = Field(default=1.0, ge=0)
    report_backoff_multiplier: float = Field(default=2.0, ge=1)
    poll_interval_s: float = Field(default=5.0, gt=0)
    poll_max_duration_s: float = Field(default=60.0, gt=0)
    run_timeout_s: float = Field(default=900.0, gt=0)
    report_failures: bool = False

    model_config = SettingsConfigDict(populate_by_name=True)


class ObservabilitySettings(BaseModel):
    otel_service_name: str = "publisher"
    otel_exporter_otlp_endpoint: str | None = None
    log_level: str = "INFO"
    json_logs: bool = False


class PublisherSettings(BaseSettings):
    security: SecuritySettings = SecuritySettings()
    github: GitHubSettings = GitHubSettings()
    generation: GenerationSettings = GenerationSettings()
    tuning: PipelineTuning = PipelineTuning()
    observability: ObservabilitySettings = ObservabilitySettings()
    environment: Literal["dev", "qa", "prod"] | str = "dev"

    model_config = SettingsConfigDict(env_nested_delimiter="__", env_prefix="PUBLISHER_", case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings(**kwargs: Any) -> PublisherSettings:
    """Return cached settings instance."""
    return PublisherSettings(**kwargs)


__all__ = ["PublisherSettings", "get_settings"]
