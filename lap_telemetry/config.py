"""
Configuration module using Pydantic BaseSettings.
All configuration is loaded from environment variables.
"""
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "LMU Lap Telemetry Backend"
    app_version: str = "1.0.0"
    debug: bool = False

    # Uploaded session stores are written here and removed after each request
    upload_dir: str = "./.tmp"

    # Timing tables
    lap_time_table: str = "Lap Time"
    sector1_table: str = "Last Sector1"
    sector2_table: str = "Last Sector2"

    # Channel tables
    speed_table: str = "Ground Speed"
    distance_table: str = "Lap Dist"
    throttle_table: str = "Throttle Pos"
    brake_table: str = "Brake Pos"
    latitude_table: str = "GPS Latitude"
    longitude_table: str = "GPS Longitude"
    rpm_table: str = "Engine RPM"
    steering_table: str = "Steering Pos"

    # Channel sample rates (Hz), fixed per recording
    speed_hz: float = Field(100.0, gt=0)
    distance_hz: float = Field(10.0, gt=0)
    input_hz: float = Field(50.0, gt=0)  # throttle + brake
    gps_hz: float = Field(10.0, gt=0)
    rpm_hz: float = Field(100.0, gt=0)
    steering_hz: float = Field(100.0, gt=0)

    # Steering Pos is stored as -1..1
    steering_scale: float = 100.0

    # Pipeline
    sample_step: int = Field(10, gt=0)
    fetch_workers: int = Field(4, ge=1)
    request_timeout_sec: float = Field(30.0, gt=0)
    max_samples_per_channel: int = Field(500_000, gt=0)
    zero_fill_missing: bool = False

    # Channel length vs. declared rate check
    rate_check: Literal["off", "warn", "error"] = "warn"
    rate_tolerance: float = Field(0.05, ge=0)

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    @model_validator(mode="after")
    def check_reference_rate(self) -> "Settings":
        # Speed is the reference axis; a faster channel would be decimated onto it
        for name in ("distance_hz", "input_hz", "gps_hz", "rpm_hz", "steering_hz"):
            if getattr(self, name) > self.speed_hz:
                raise ValueError(f"{name} ({getattr(self, name)}) exceeds speed_hz ({self.speed_hz})")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
