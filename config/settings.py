"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 5000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    # ── Record Store ─────────────────────────────────────────
    record_store_type: str = "memory"  # "memory" or "mongo"
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "examDB"
    mongo_timeout_ms: int = 10000

    # ── Evaluator ────────────────────────────────────────────
    evaluator_url: str = "http://localhost:8000/evaluate"
    evaluator_timeout: float = 30.0  # seconds
    evaluator_max_retries: int = 3
    evaluator_retry_base_delay: float = 0.5  # seconds, doubles each attempt

    # ── Throttle ─────────────────────────────────────────────
    throttle_mode: str = "fixed"  # "fixed", "gate" or "none"
    throttle_interval_ms: int = 1000


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
