"""Centralised dispatch settings loaded from environment / .env file."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Matching
    matching_strategy: Literal["nearest", "best_rated"] = "nearest"
    max_match_attempts: int = Field(3, ge=1)  # bounded retry on lost races
    distance_metric: Literal["euclidean", "haversine"] = "euclidean"

    # Pricing
    base_fare: float = Field(50.0, ge=0)  # INR

    # Bounded waits
    lock_timeout_seconds: float = Field(5.0, gt=0)
    payment_timeout_seconds: float = Field(10.0, gt=0)

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = {"env_file": ".env", "env_prefix": "DISPATCH_", "extra": "ignore"}


settings = Settings()
