"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "Resume Roast Storage"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Storage
    STORAGE_MAX_RETRIES: int = 3  # retries after the first attempt
    STORAGE_RETRY_BACKOFF_SECONDS: float = 1.0  # wait before retry n is n * base
    USER_AGENT_MAX_LENGTH: int = 200
    RECENT_WINDOW_HOURS: int = 24
    DATA_RETENTION_DAYS: int = 90

    # Heuristic fallbacks
    MIN_EXTRACTED_TEXT_LENGTH: int = 10
    INDUSTRY_KEYWORDS: List[str] = [
        "javascript", "python", "react", "node", "aws", "docker", "mongodb", "django",
    ]

    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def __getattr__(name: str):
    # ``settings`` is built on first access, not at import
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
