"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_normalizer.services.resolver import MatchStrategy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "high"
    openai_store: bool = False
    alias_match_strategy: str = "longest"
    lookup_max_concurrency: int = 5
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_match_strategy(raw: str | None) -> MatchStrategy:
    """Normalize the alias match strategy setting."""
    if raw is None:
        return "longest"
    cleaned = raw.strip().lower()
    if cleaned in {"first", "first-match", "first_match"}:
        return "first"
    return "longest"
