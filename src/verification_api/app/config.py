"""Runtime settings loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "verification-api"
    # Required at startup but not read by any request path.
    mongodb_uri: str = Field(default="", validation_alias="MONGODB_URI")
    queue_program: str = "pueue"
    job_name: str = "secret-contract-verifier"
    # None keeps queue calls unbounded.
    queue_timeout_s: float | None = Field(default=None, gt=0)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="VERIFICATION_API_",
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
