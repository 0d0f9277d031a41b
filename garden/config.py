"""Configuration settings for the garden, loaded from environment variables."""

from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with env-driven overrides.

    All values can be overridden via environment variables prefixed with GARDEN_.
    Example: GARDEN_FRAME_RATE=30 overrides frame_rate.
    """

    # Frame loop
    frame_rate: int = Field(default=60, gt=0)  # frames per second
    max_frames: int = 0  # 0 = run until stopped

    # Screen
    background_color: int = 13
    banner_text: str = "HELLO WORLD!"
    banner_x: int = 84
    banner_y: int = 84

    # Statistics
    stats_interval_frames: int = Field(default=300, gt=0)
    frame_time_history: int = 60  # recent frame durations kept for averaging

    # Headless host
    random_seed: Optional[int] = None

    # Logging
    log_level: str = "info"

    model_config = SettingsConfigDict(
        env_prefix="GARDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def frame_budget_sec(self) -> float:
        return 1.0 / self.frame_rate
