from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Configuration sourced from environment variables."""

    title: str = "Alert Trust-Scoring Service"
    version: str = "1.0.0"
    log_level: str = "INFO"
    cors_origins: str = "*"

    # Scoring constants. Unvalidated heuristics; see DESIGN.md.
    verification_threshold: float = Field(default=0.70, ge=0.0, le=1.0)
    content_weight: float = Field(default=0.4, ge=0.0)
    source_weight: float = Field(default=0.3, ge=0.0)
    location_weight: float = Field(default=0.15, ge=0.0)
    temporal_weight: float = Field(default=0.1, ge=0.0)
    cross_reference_weight: float = Field(default=0.05, ge=0.0)

    recent_window_hours: float = Field(default=24.0, gt=0.0)
    future_skew_minutes: float = Field(default=5.0, ge=0.0)

    lookup_timeout: float = Field(default=5.0, gt=0.0)
    max_concurrency: int = Field(default=8, ge=1)
    max_batch_size: int = Field(default=100, ge=1)

    reputation_api_url: str | None = None
    disaster_zone_api_url: str | None = None
    official_feed_api_url: str | None = None
    official_sources: list[str] = Field(default_factory=lambda: ["NDMA", "IMD", "Local Authorities"])

    heuristics_path: str | None = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "case_sensitive": False,
    }

    def get_cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]


@lru_cache(1)
def get_settings() -> Settings:
    return Settings()
