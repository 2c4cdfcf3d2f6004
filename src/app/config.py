from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: Optional[AnyUrl] = None
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    APP_ENV: str = "local"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
    )

    SIMILAR_RECIPES_LIMIT: int = Field(default=10, ge=1)
    DEFAULT_PACK_SIZE: int = Field(default=10, ge=1)
    MAX_PACK_SIZE: int = Field(default=25, ge=1)
    SIMILARITY_THRESHOLD: float = Field(default=0.80, ge=0.0, le=1.0)


@lru_cache
def get_settings() -> Settings:
    return Settings()
