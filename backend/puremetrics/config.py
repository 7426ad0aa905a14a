from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # App settings
    app_name: str = "PureMetrics"

    # Local store (one blob per collection)
    database_url: str = "sqlite:///./data/puremetrics.db"

    # Firebase / Firestore remote
    firebase_project_id: str = ""
    firebase_api_key: str = ""
    firestore_base_url: str = "https://firestore.googleapis.com/v1"
    identity_base_url: str = "https://identitytoolkit.googleapis.com/v1"
    remote_timeout_seconds: float = 30.0

    # Sign-in resync: short debounce before pulling, hard bound on the pull
    sync_debounce_seconds: float = 0.5
    sync_timeout_seconds: float = 60.0

    # Analytics tuning constants (UI thresholds, not clinical ones)
    trend_percent_threshold: float = 5.0
    fitness_weight_threshold_lbs: float = 5.0

    @property
    def debug(self) -> bool:
        """Debug mode is only enabled in development."""
        return self.environment == "development"

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def remote_configured(self) -> bool:
        """True when enough Firebase settings exist to reach the remote store."""
        return bool(self.firebase_project_id and self.firebase_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
