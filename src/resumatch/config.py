from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Resumatch"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/resumatch.db"
    document_store_url: str = "sqlite:///./data/resumatch_documents.db"
    data_dir: Path = Path("./data")
    upload_dir: Path = Path("./data/uploads")

    ai_provider: str = "gemini"

    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-pro"
    gemini_timeout_sec: int = 60

    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_timeout_sec: int = 60

    match_batch_size: int = 20
    resume_text_max_chars: int = 20000
    resume_max_bytes: int = 5 * 1024 * 1024
    resume_allowed_types: str = (
        "application/pdf,"
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document,"
        "text/plain"
    )

    application_status_policy: str = "permissive"

    web_ui_enabled: bool = True
    cors_origins: str = "http://127.0.0.1:8000"

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("ai_provider")
    @classmethod
    def validate_ai_provider(cls, value: str) -> str:
        allowed = {"gemini", "openai"}
        if value not in allowed:
            raise ValueError(f"ai_provider must be one of {sorted(allowed)}")
        return value

    @field_validator("application_status_policy")
    @classmethod
    def validate_status_policy(cls, value: str) -> str:
        allowed = {"permissive", "strict"}
        if value not in allowed:
            raise ValueError(f"application_status_policy must be one of {sorted(allowed)}")
        return value

    @field_validator("match_batch_size")
    @classmethod
    def validate_batch_size(cls, value: int) -> int:
        if value < 1:
            raise ValueError("match_batch_size must be at least 1")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def resume_allowed_type_list(self) -> list[str]:
        return [item.strip() for item in self.resume_allowed_types.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
