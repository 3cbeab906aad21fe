"""Application settings, read from the environment (or a .env file)."""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # --- transport / bot ---
    bot_token: Optional[str] = None
    allowed_origins: str = "*"
    port: int = 8080
    verify_init_data: bool = False
    # checked against the X-Telegram-Bot-Api-Secret-Token header of webhook calls
    webhook_secret: Optional[str] = None

    # --- game rules ---
    move_timeout_seconds: float = 300.0

    # --- ratings ---
    database_url: str = "sqlite:///:memory:"
    default_rating: int = 1500
    win_bonus: int = 5
    upset_penalty: int = 4
    loss_penalty: int = 3
    rating_floor: int = 0

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def move_timeout(self) -> timedelta:
        return timedelta(seconds=self.move_timeout_seconds)

    @property
    def origins(self) -> list[str]:
        """'*' or a comma separated list of domains."""
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()
