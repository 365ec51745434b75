from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./eventhub.db"
    database_echo: bool = False
    redis_url: str = "redis://localhost:6379/0"
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None
    celery_default_queue: str = "eventhub-default"
    secret_key: str = "change-me"

    # Application URLs
    frontend_url: str = "http://localhost:3000"
    api_base_url: str = "http://localhost:8000"

    # Internal API security
    internal_api_key: str = ""

    # Localized messages
    default_locale: str = "es"
    supported_locales: list[str] = Field(default_factory=lambda: ["es", "en"])

    @field_validator("supported_locales", mode="before")
    @classmethod
    def _parse_locale_list(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip().lower() for item in value.split(",") if item.strip()]
        if isinstance(value, (list, tuple, set)):
            return [str(item).strip().lower() for item in value if str(item).strip()]
        return []

    # Courtesy grants
    courtesy_transaction_isolation: Literal[
        "SERIALIZABLE", "REPEATABLE READ", "READ COMMITTED"
    ] = "SERIALIZABLE"
    courtesy_notifications_enabled: bool = False
    courtesy_notification_task_queue: str = "courtesy-notifications"
    speaker_placeholder_document_prefix: str = "SPEAKER-"

    # Email / notification settings
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    smtp_sender_email: str | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
