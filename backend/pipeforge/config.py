"""Configuration management for pipeforge."""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

POLICY_SCOPES = ("read-only", "deploy-only", "full-access")


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PIPEFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "pipeforge"
    debug: bool = False
    json_logs: bool = False

    # GitHub
    github_api_base: str = "https://api.github.com"
    github_token: str | None = None  # Optional, raises the anonymous rate limit
    http_timeout: float = 30.0  # seconds per GitHub request

    # Stack detection
    fetch_concurrency: int = 4  # Max manifest fetches in flight

    # Workflow document
    workflow_branch: str = "main"
    workflow_runner: str = "ubuntu-latest"
    default_workflow_name: str = "Deploy Application"

    # Access policies
    default_policy_scope: str = "deploy-only"

    @field_validator("github_api_base")
    @classmethod
    def validate_github_api_base(cls, v: str) -> str:
        """Validate GitHub API base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("GitHub API base must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("default_policy_scope")
    @classmethod
    def validate_default_policy_scope(cls, v: str) -> str:
        if v not in POLICY_SCOPES:
            raise ValueError(f"default_policy_scope must be one of: {', '.join(POLICY_SCOPES)}")
        return v

    @field_validator("fetch_concurrency")
    @classmethod
    def validate_fetch_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("fetch_concurrency must be at least 1")
        return v


settings = Settings()


def get_config_dict() -> dict[str, Any]:
    """Get non-secret config values as a dict."""
    return {
        "app_name": settings.app_name,
        "debug": settings.debug,
        "github_api_base": settings.github_api_base,
        "fetch_concurrency": settings.fetch_concurrency,
        "workflow_branch": settings.workflow_branch,
        "workflow_runner": settings.workflow_runner,
        "default_policy_scope": settings.default_policy_scope,
    }
