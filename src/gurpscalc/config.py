"""Configuration management for gurpscalc using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from gurpscalc.rules.damage_progression import DamageProgression


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="GURPSCALC_",
        extra="ignore",
    )

    # Rules
    damage_progression: DamageProgression = Field(
        default=DamageProgression.BASIC_SET,
        description="Damage progression rule for new characters",
    )
    rules_file: Path | None = Field(
        default=None,
        description="Attribute definitions file; the standard set is used when unset",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
