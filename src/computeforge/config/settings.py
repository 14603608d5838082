"""
Application settings using Pydantic.

Provides environment-based configuration loading with COMPUTEFORGE_ prefix.
Credentials (compute access token, GitHub and PagerDuty tokens) are injected
here by the deployment; nothing in the core fetches them.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COMPUTEFORGE_",
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # API
    api_prefix: str = "/api/v1"

    # AWS
    aws_region: str = "us-east-1"
    metrics_namespace: str = "ComputeForge"

    # Compute API
    compute_provider: str = "gce"  # gce, memory
    compute_base_url: str = "https://compute.googleapis.com/compute/v1"
    compute_access_token: str | None = None
    operation_poll_interval: float = 2.0
    operation_timeout: float = 600.0
    apply_concurrency: int = 4

    # HTTP client settings
    http_timeout: int = 30
    http_max_retries: int = 3
    http_retry_backoff_factor: float = 0.5

    # GitHub (VCS trigger + commit status relay)
    github_base_url: str = "https://api.github.com"
    github_token: str | None = None
    github_webhook_secret: str | None = None
    github_status_context: str = "computeforge/provision"
    vcs_parameter_file: str = "provision.yaml"

    # PagerDuty (incident trigger + note relay)
    pagerduty_token: str | None = None
    pagerduty_from_email: str = "computeforge@example.com"
    pagerduty_webhook_secret: str | None = None

    # Trigger-side parameter defaults (never applied inside the core)
    parameter_defaults: dict[str, str] = {}

    # Queue settings
    sqs_queue_url: str | None = None
    job_queue_backend: str = "memory"  # memory, sqs


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
