"""
Configuration management for the gear simulation.
Uses pydantic-settings for environment variable parsing.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import CELL_SIZE, GRID_HEIGHT, GRID_WIDTH, MESH_TOLERANCE


class Settings(BaseSettings):
    """Simulation settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GEARWORKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Grid
    grid_width: int = Field(
        default=GRID_WIDTH,
        gt=0,
        description="Number of grid columns"
    )
    grid_height: int = Field(
        default=GRID_HEIGHT,
        gt=0,
        description="Number of grid rows"
    )
    cell_size: float = Field(
        default=CELL_SIZE,
        gt=0,
        description="World units per grid cell"
    )

    # Meshing
    mesh_tolerance: float = Field(
        default=MESH_TOLERANCE,
        ge=0,
        description="Allowed slack between centre distance and summed radii"
    )

    # Startup
    spawn_motor_on_start: bool = Field(
        default=False,
        description="Place one motor on a random empty cell when a game is created"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the motor placement RNG. None means unseeded"
    )

    # CLI
    log_level: str = Field(default="INFO")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Pass an explicit Settings to Game() to bypass the cache.
    """
    return Settings()
