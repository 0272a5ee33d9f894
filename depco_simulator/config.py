"""Configuration management using Pydantic Settings"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upstream lending API
    lending_api_base: str = "http://localhost:8000/api/v1"

    # Service
    service_name: str = "depco-simulator"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    upstream_max_retries: int = 3
    upstream_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Loan statuses counted as current exposure
    default_exposure_statuses: List[str] = ["pending", "approved", "active"]

    # Simulator sessions kept in memory before least recently used are evicted
    session_max_entries: int = 1000


settings = Settings()
