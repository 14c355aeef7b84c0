"""
Configuration Settings.
Values come from the environment or a .env file; names are case-insensitive.
"""

from datetime import date
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "HealthLink"
    app_version: str = "1.0.0"
    debug: bool = True

    # JWT
    secret_key: str = "your-secret-key-change-this-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Document store (only "local" is implemented)
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # Earliest date the history view can show
    history_start_date: date = date(2020, 1, 1)

    # Hosted language model used by the prediction and chat flows
    llm_provider: str = "gemini"  # "gemini" or "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # provider default when unset
    llm_base_url: Optional[str] = None  # provider default when unset
    llm_temperature: float = 0.7
    llm_max_tokens: int = 2048
    llm_timeout: float = 120.0

    # Provider-specific keys, used when LLM_API_KEY is unset
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
        "http://127.0.0.1:3000",
    ]

    # Logging
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_console_enabled: bool = True
    log_file_enabled: bool = True
    log_file_path: str = "./logs/healthlink.log"
    log_json_format: bool = True  # file handler only; console stays human-readable
    log_api_requests: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
