"""
Application configuration settings.
"""
import os
from typing import Annotated, Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Application metadata
    PROJECT_NAME: str = "Prompt Release Service"
    API_V1_STR: str = "/api/v1"

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    # Database; "sqlite://" (in-memory) is single-connection, for tests only
    DB_DIR: str = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../data/db'))
    DATABASE_URL: str = f"sqlite:///{os.path.join(DB_DIR, 'prompts.db')}"

    # Attribution used when a request carries no X-Actor header
    DEFAULT_ACTOR: str = "system"

    # Environments seeded by init_db (key -> display name)
    DEFAULT_ENVIRONMENTS: Dict[str, str] = {
        "dev": "Development",
        "stage": "Staging",
        "prod": "Production",
    }
    DEFAULT_ENVIRONMENT_KEY: str = "prod"

    # Attempts for the version-number compare-and-swap, read on each create_version call
    VERSION_CREATE_MAX_ATTEMPTS: int = 5

    # Include exception text in 500 responses
    EXPOSE_ERROR_DETAILS: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str] | str:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    @field_validator("VERSION_CREATE_MAX_ATTEMPTS")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("VERSION_CREATE_MAX_ATTEMPTS must be >= 1")
        return v

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


# Initialize settings
settings = Settings()
