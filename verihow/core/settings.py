from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "verihow"
    log_level: str = "INFO"
    cors_origins: str = ""

    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.5-flash"
    gemini_timeout_seconds: float = 90.0
    fact_check_temperature: float = 0.1

    history_backend: str = "sql"
    history_storage_key: str = "verihow_history"
    max_history_items: int = 50
    max_image_bytes: int = 5 * 1024 * 1024

    database_url: str = "sqlite:///./verihow.db"

    @field_validator("gemini_base_url", mode="before")
    @classmethod
    def _normalize_gemini_base_url(cls, value: str) -> str:
        return str(value or "https://generativelanguage.googleapis.com/v1beta").strip().rstrip("/")

    @field_validator("history_backend", mode="before")
    @classmethod
    def _normalize_history_backend(cls, value: str) -> str:
        backend = str(value or "sql").strip().lower()
        if backend in {"sql", "memory"}:
            return backend
        return "sql"

    @field_validator("max_history_items", mode="before")
    @classmethod
    def _normalize_max_history_items(cls, value: object) -> int:
        try:
            return max(1, int(value))
        except (TypeError, ValueError):
            return 50

    @property
    def cors_origins_list(self) -> list[str]:
        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
        if origins:
            return origins
        return [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
