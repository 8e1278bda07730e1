"""
チャットUIの設定
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    page_title: str = "Local ChatGPT"
    relay_base_url: str = "http://localhost:5000"
    default_model: str = "gpt-4o-2024-08-06"
    # None の場合は requests の既定（タイムアウトなし）
    request_timeout: float | None = None


settings = Settings()
