from functools import lru_cache
from typing import Any, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Infra
    storage_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://redis:6379/0"
    smtp_base_url: str = "http://smtp-mock:8025"

    # Magic codes
    magic_code_secret: str = "dev-secret-change-me-please"
    code_length: int = 6
    code_expires_in_minutes: float = 30
    code_field_name: str = "code"
    user_key_field_name: str = "email"
    email_subject: str = "Your sign-in code"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    def magic_code_args(self) -> dict[str, Any]:
        """Raw engine configuration; storage is chosen by the caller."""
        return {
            "secret": self.magic_code_secret,
            "code_length": self.code_length,
            "expires_in_minutes": self.code_expires_in_minutes,
            "code_field_name": self.code_field_name,
            "user_key_field_name": self.user_key_field_name,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
