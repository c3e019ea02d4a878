from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Load .env for local/dev environments only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from TILEWORLD_* environment variables."""

    # Terrain Resolution
    map_quality: int = Field(default=1, ge=1, description="Map resolution quality knob")
    water_quality: int = Field(default=1, ge=1, description="Water resolution quality knob")
    mountain_noise: str = Field(default="perlin", description="Mountain noise source (perlin or ridged)")

    # World Configuration
    plots_x: int = Field(default=49, ge=1, description="World grid width in tiles")
    plots_y: int = Field(default=49, ge=1, description="World grid height in tiles")
    world_seed: str = Field(default="tileworld", description="Seed for the world PRNG")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    class Config:
        env_prefix = "TILEWORLD_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # .env may hold keys for other tools


# Instantiate singleton settings object
settings = Settings()


def get_settings() -> Settings:
    """Fresh settings read from the current environment."""
    return Settings()
