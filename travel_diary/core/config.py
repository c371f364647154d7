"""Settings for the travel diary, read from the environment or ``.env``.

Relative paths resolve against the working directory the server is
started from.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings.

    Variable names match the attribute names exactly (case sensitive).
    An empty ``GEMINI_API_KEY`` switches title and place-name generation
    to the built-in templates and gazetteer.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = Field("development", description="'production' switches logs to JSON")
    DEBUG: bool = False

    DATA_FILE: Path = Field(Path("data/travels.json"), description="JSON array of travel entries")
    UPLOAD_DIR: Path = Field(Path("public/uploads"), description="Stored media, served at /uploads")
    MAX_UPLOAD_FILES: int = Field(10, ge=1)

    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.0-flash"

    CORS_ORIGINS: str = Field("*", description="Comma-separated origins")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def gemini_enabled(self) -> bool:
        return bool(self.GEMINI_API_KEY.strip())


@lru_cache
def get_settings() -> Settings:
    """Settings from the process environment, built once."""
    return Settings()
