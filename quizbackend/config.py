"""Application configuration module."""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORE_BACKENDS = ("supabase", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings."""
    
    # Remote record store (hosted Postgres behind a REST gateway)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    STORE_BACKEND: str = "supabase"
    STORE_TIMEOUT_SECONDS: float = 10.0
    DIFFICULTY_TABLE: str = "question_difficulties"
    RECALCULATE_FUNCTION: str = "recalculate_all_difficulties"
    
    # Difficulty cache and bulk loading
    DIFFICULTY_CACHE_TTL_SECONDS: int = 2 * 60 * 60
    BULK_PAGE_SIZE: int = 1100
    ADMIN_MAX_ROWS: int = 10000
    PRELOAD_CACHE: bool = True
    
    # Quiz images
    QUIZ_IMAGES_DIR: str = "wwwroot/quiz_images"
    
    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None
    
    # API settings
    PROJECT_NAME: str = "Image Quiz Backend"
    
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )
    
    @field_validator("STORE_BACKEND")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate the store backend name"""
        if v.lower() not in STORE_BACKENDS:
            raise ValueError(f"Invalid store backend: {v}. Must be one of {list(STORE_BACKENDS)}")
        return v.lower()
    
    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level"""
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {list(LOG_LEVELS)}")
        return v.upper()
    
    @field_validator("BULK_PAGE_SIZE", "ADMIN_MAX_ROWS", "DIFFICULTY_CACHE_TTL_SECONDS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v


# Create global settings instance
settings = Settings()
