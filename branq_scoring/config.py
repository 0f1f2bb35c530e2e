"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Service
    service_name: str = "branq-scoring"
    log_level: str = "INFO"

    # Protocol registry (defaults to the JSON file shipped with the package)
    protocol_registry_path: Optional[str] = None

    # Scoring
    default_currency: str = "SOL"
    credit_score_min: int = 300
    credit_score_max: int = 850


settings = Settings()
