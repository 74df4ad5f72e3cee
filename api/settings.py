"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here. Settings are loaded once at
startup and cached.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shelf.auth_middleware import _is_docker_environment

logger = logging.getLogger(__name__)


def _is_github_actions() -> bool:
    """Detect if running in GitHub Actions CI environment.

    Returns True only when BOTH CI=true AND GITHUB_ACTIONS=true are set.
    """
    return os.getenv("CI") == "true" and os.getenv("GITHUB_ACTIONS") == "true"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Defaults target local development against a PocketBase on 127.0.0.1:8090.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Authentication ===
    auth_mode: str = Field(
        default="production",
        description="Authentication mode: 'production' (PocketBase tokens) or 'bypass' (dev only)",
    )
    dev_user_id: str = Field(
        default="",
        description="User id to act as in bypass mode (overridable per request with X-Dev-User)",
    )
    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase superuser authentication on startup (for testing)",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@edushelf.local",
        description="PocketBase superuser email for API access",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase superuser password (required - no default for security)",
    )

    # === CORS Configuration ===
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    # === Docker Detection ===
    is_docker: bool = Field(default=False, description="Whether running in Docker container")
    docker_container: bool = Field(default=False, description="Explicit Docker container flag")

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Warn when the superuser password is unset or trivially guessable."""
        if v in {"", "password", "admin", "123456"}:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file for production use."
            )
        return v

    @field_validator("auth_mode", mode="after")
    @classmethod
    def validate_auth_mode(cls, v: str) -> str:
        v = v.lower()
        if v not in ("bypass", "production"):
            raise ValueError(f"Invalid AUTH_MODE: {v}. Must be 'bypass' or 'production'")
        return v

    @field_validator("is_docker", "docker_container", mode="before")
    @classmethod
    def parse_flag(cls, v: str | bool) -> bool:
        """Parse flags given as 'true', '1', 'yes', etc."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes")
        return False

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    def is_docker_environment(self) -> bool:
        return self.is_docker or self.docker_container or _is_docker_environment()

    def get_effective_auth_mode(self) -> str:
        """Get effective auth mode, forcing production in Docker (except CI)."""
        if self.is_docker_environment() and not _is_github_actions():
            return "production"
        return self.auth_mode


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
