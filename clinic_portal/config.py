"""Application configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="ClinicCare", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Backend API
    api_base_url: str = Field(default="http://localhost:8080/api", alias="API_BASE_URL")
    # None keeps the httpx transport default
    api_timeout: float | None = Field(default=None, alias="API_TIMEOUT")

    # Session storage
    storage_backend: str = Field(
        default="file",
        alias="STORAGE_BACKEND",
        description="One of: file, redis, memory",
    )
    storage_path: str = Field(default=".clinic_session.json", alias="STORAGE_PATH")

    # Redis
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_username: str = Field(default="default", alias="REDIS_USERNAME")
    redis_password: str = Field(default="", alias="REDIS_PASSWORD")
    redis_key_prefix: str = Field(default="clinic_portal:", alias="REDIS_KEY_PREFIX")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
