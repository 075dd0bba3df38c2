from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "Error Mapper"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Stock producers
    DEFAULT_ERROR_STATUS: int = 500
    EXPOSE_ERROR_DETAIL: bool = False  # never applied to 5xx responses

    # ASGI adapter
    RECORD_RAISED_EXCEPTIONS: bool = False

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_level(cls, v: Any):
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v

    @field_validator("DEFAULT_ERROR_STATUS")
    @classmethod
    def _require_error_status(cls, v: int):
        if not 400 <= v <= 599:
            raise ValueError("DEFAULT_ERROR_STATUS must be a 4xx or 5xx status code")
        return v

    model_config = SettingsConfigDict(
        env_prefix="ERROR_MAPPER_",
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
