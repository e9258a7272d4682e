from functools import lru_cache
from typing import Optional

from pydantic import Field, HttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    bot_token: str = Field(alias="BOT_TOKEN")

    # Completion service
    assistant_id: str = Field(default="", alias="ASSISTANT_ID")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_timeout_sec: float = Field(default=60.0, gt=0, alias="OPENAI_TIMEOUT_SEC")
    openai_max_attempts: int = Field(default=3, ge=1, alias="OPENAI_MAX_ATTEMPTS")

    # Webhook / web server (polling is used when WEBHOOK_URL is not set)
    webhook_url: Optional[HttpUrl] = Field(default=None, alias="WEBHOOK_URL")
    webhook_path: str = Field(default="/webhook", alias="WEBHOOK_PATH")
    webapp_host: str = Field(default="0.0.0.0", alias="WEBAPP_HOST")
    webapp_port: int = Field(default=3008, alias="PORT")

    # Admission
    max_messages: int = Field(default=20, ge=1, alias="MAX_MESSAGES")
    rate_window_sec: int = Field(default=24 * 60 * 60, ge=1, alias="RATE_WINDOW_SEC")
    notification_threshold: int = Field(default=15, ge=1, alias="NOTIFICATION_THRESHOLD")
    ban_duration_sec: int = Field(default=24 * 60 * 60, ge=1, alias="BAN_DURATION_SEC")

    # Per-user state
    user_store_capacity: int = Field(default=1000, ge=1, alias="USER_STORE_CAPACITY")
    heartbeat_interval_sec: float = Field(default=1.0, gt=0, alias="HEARTBEAT_INTERVAL_SEC")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=False, alias="LOG_JSON")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        allowed = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        if level not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL={value!r}. Allowed: {sorted(allowed)}")
        return level

    @model_validator(mode="after")
    def _check_limits(self) -> "AppSettings":
        if self.notification_threshold > self.max_messages:
            raise ValueError("NOTIFICATION_THRESHOLD must be <= MAX_MESSAGES")
        return self


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()
