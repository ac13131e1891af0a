"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict

# Project root: tritimes/
PROJECT_ROOT = Path(__file__).parent.parent.parent
# Data directory: tritimes/data/ (race CSVs, manifest, built artifacts)
DATA_DIR = PROJECT_ROOT / "data"


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Data ===
    data_dir: Path = Field(
        default=DATA_DIR,
        description="Directory with races.json, race CSVs and index artifacts"
    )
    use_precomputed_histograms: bool = Field(
        default=True,
        description="Serve result histograms from histograms/*.json.gz when present"
    )

    # === Search ===
    search_default_limit: int = Field(default=10, ge=1)
    search_max_limit: int = Field(default=50, ge=1)

    # === CORS ===
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins"
    )

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',')]
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
