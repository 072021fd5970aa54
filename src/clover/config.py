"""Configuration management for Clover."""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36 Edg/129.0.0.0"
)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CLOVER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote endpoints
    auth_url: str = Field(
        default="https://user-domain.blum.codes/api/v1/auth/provider/PROVIDER_TELEGRAM_MINI_APP",
        description="Endpoint exchanging the mini-app payload for a token",
    )
    start_url: str = Field(default="https://game-domain.blum.codes/api/v2/game/play")
    claim_url: str = Field(default="https://game-domain.blum.codes/api/v2/game/claim")
    payload_url: str = Field(
        default="https://blum-payload-generator.hariistimewa.my.id/process",
        description="External payload-generation service",
    )
    payload_api_key: str | None = Field(default="etl1", description="apiKey query parameter for the payload service")
    referral_token: str = Field(default="554eWV40LM")

    # Transport
    request_timeout: float = Field(default=15.0, gt=0, description="Total timeout per request in seconds")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    origin: str = Field(default="https://telegram.blum.codes")

    # Game
    pacing_seconds: float = Field(default=33.0, ge=0, description="Simulated gameplay time per session")
    score_min: int = Field(default=199)
    score_max: int = Field(default=250)
    currency: str = Field(default="CLOVER")

    # Logging
    log_level: str = Field(default="INFO")

    @property
    def score_range(self) -> tuple[int, int]:
        """Inclusive score bounds, smallest first regardless of configuration order."""
        return min(self.score_min, self.score_max), max(self.score_min, self.score_max)


def load_settings(**overrides: Any) -> Settings:
    """Load settings from the environment, applying explicit non-None overrides."""
    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
