"""Service configuration, loaded with pydantic-settings.

Values come from the process environment or a local ``.env`` file and are
type-checked once, when ``get_settings()`` is first called. A malformed
value (say ``STORE_BACKEND=redis``) stops start-up with a validation error.

Example:
    STORE_BACKEND=sql DATABASE_URL=postgresql+asyncpg://app@db/settlement \\
        uvicorn property_settlement.main:app
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Every tunable of the settlement service, with development defaults."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Runtime ---
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    # --- Transaction store ---
    # "memory" keeps records for the life of the process; "sql" persists them.
    store_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite+aiosqlite:///./property_settlement.db"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_echo_sql: bool = False

    # --- Collaborators ---
    contract_template_version: str = "v2.1-AI"
    notary_default_threshold: float = Field(default=0.95, ge=0.0, le=1.0)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the settings once per process and reuse them."""
    return Settings()
