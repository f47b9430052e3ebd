"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables (or a ``.env`` file)
following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_list(value: str) -> list[str]:
    if not value.strip():
        return []
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="Async SQLAlchemy connection string (postgresql+asyncpg:// or sqlite+aiosqlite://)",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # JWT
    jwt_secret_key: str = Field(min_length=32, description="Secret key for verifying JWTs (minimum 32 characters)")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30,
        description="Access token expiration in minutes",
        gt=0,
    )

    # Geocoding: provider tiers
    geocoder_reverse_order: str = Field(
        default="nominatim,photon",
        description="Comma-separated provider fallback order for reverse geocoding visit coordinates",
    )
    geocoder_verify_order: str = Field(
        default="census,nominatim",
        description="Comma-separated provider fallback order for postal verification of new addresses",
    )

    # Geocoding: Census Bureau
    geocoder_census_timeout: float = Field(
        default=10.0,
        description="Census request timeout in seconds",
        gt=0,
    )

    # Geocoding: Nominatim (OpenStreetMap)
    geocoder_nominatim_email: str = Field(
        default="",
        description="Email for Nominatim usage policy compliance",
    )
    geocoder_nominatim_timeout: float = Field(
        default=10.0,
        description="Nominatim request timeout in seconds",
        gt=0,
    )

    # Geocoding: Photon (Komoot)
    geocoder_photon_base_url: str = Field(
        default="https://photon.komoot.io",
        description="Photon geocoder base URL (self-hostable)",
    )
    geocoder_photon_timeout: float = Field(
        default=10.0,
        description="Photon request timeout in seconds",
        gt=0,
    )

    @property
    def geocoder_reverse_order_list(self) -> list[str]:
        """Provider names for reverse geocoding, in fallback order."""
        return _split_list(self.geocoder_reverse_order)

    @property
    def geocoder_verify_order_list(self) -> list[str]:
        """Provider names for forward verification, in fallback order."""
        return _split_list(self.geocoder_verify_order)

    # Scoring
    score_points_for_knock: int = Field(
        default=5,
        description="Baseline points awarded for every completed visit",
        ge=0,
    )
    score_points_per_response_change: int = Field(
        default=2,
        description="Points for changing an existing resident's canvass response",
        ge=0,
    )
    score_points_per_affiliation_change: int = Field(
        default=1,
        description="Points for changing an existing resident's party affiliation",
        ge=0,
    )
    score_points_per_new_person: int = Field(
        default=0,
        description="Points for recording a resident for the first time",
        ge=0,
    )

    # Ingestion
    address_conflict_max_retries: int = Field(
        default=3,
        description="Attempts at an ingestion before a concurrent address write is surfaced as a conflict",
        gt=0,
    )

    # Leaderboards
    ranking_page_size: int = Field(
        default=50,
        description="Maximum entries returned by a ranking query",
        gt=0,
        le=500,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, dev, staging)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
