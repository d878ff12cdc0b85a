"""Configuration settings using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Database
    database_url: str

    # Runtime
    environment: Literal["development", "production"] = "development"
    api_docs_enabled: bool | None = None
    metrics_token: str | None = None

    # Uploads
    upload_path: str = "uploads"
    max_upload_size_mb: int = 50

    # Statements at or above this many milliseconds are logged; 0 disables
    slow_query_ms: float = 0

    # CORS
    cors_allow_origins: Annotated[list[str], NoDecode] = ["http://localhost:3000"]
    cors_allow_methods: Annotated[list[str], NoDecode] = ["GET", "POST", "OPTIONS"]
    cors_allow_headers: Annotated[list[str], NoDecode] = [
        "Accept",
        "Content-Type",
        "X-Request-ID",
        "X-Account-Id",
        "X-Metrics-Token",
    ]
    cors_allow_credentials: bool = True

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _parse_csv_lists(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def max_upload_size(self) -> int:
        """Maximum accepted upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Settings:
        if self.environment != "production":
            return self

        if not Path(self.upload_path).is_absolute():
            raise ValueError("UPLOAD_PATH must be an absolute path in production")

        if any(x == "*" for x in self.cors_allow_origins):
            raise ValueError("CORS_ALLOW_ORIGINS cannot contain '*' in production")
        if any(x == "*" for x in self.cors_allow_methods):
            raise ValueError("CORS_ALLOW_METHODS cannot contain '*' in production")
        if any(x == "*" for x in self.cors_allow_headers):
            raise ValueError("CORS_ALLOW_HEADERS cannot contain '*' in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
