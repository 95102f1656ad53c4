"""
Configuration management for the REVA lead service.

This module handles all application settings loaded from environment variables,
providing type-safe configuration with validation and defaults.

Design decisions:
- Pydantic Settings for automatic env var loading and validation
- Separate sections for different concerns (external APIs, cache, metrics, security)
- Validators ensure data integrity at startup
- Properties for computed values (is_production, is_development)
"""

from typing import Union

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_JWT_SECRET = "dev_secret_change_in_production"


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    All settings can be overridden via environment variables.
    Example: PDL_API_KEY=xxx uvicorn reva.main:app

    Configuration sections:
    1. People Data Labs - contact enrichment
    2. Google Places - live business search
    3. Cache - enrichment result TTLs and sweep cadence
    4. Metrics - request monitor capacity and slow threshold
    5. Application - runtime behavior configuration
    6. Security - CORS, rate limiting and JWT settings
    """

    # ===== People Data Labs Configuration =====
    pdl_api_key: str | None = Field(
        default=None,
        description="API key for People Data Labs person enrichment"
    )
    pdl_base_url: str = Field(
        default="https://api.peopledatalabs.com",
        description="Base URL for People Data Labs API"
    )
    pdl_timeout: int = Field(
        default=15,
        ge=1, le=120,
        description="HTTP timeout in seconds for enrichment calls"
    )
    pdl_min_likelihood: int = Field(
        default=7,
        ge=1, le=10,
        description="Minimum match likelihood accepted by PDL"
    )
    enrichment_top_count: int = Field(
        default=5,
        ge=0, le=50,
        description="How many leads (from the top) are enriched on save"
    )

    # ===== Google Places Configuration =====
    google_places_api_key: str | None = Field(
        default=None,
        description="Google Places key; mock leads are generated when unset"
    )
    google_places_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/place",
        description="Base URL for Google Places web service"
    )
    google_places_timeout: int = Field(
        default=15,
        ge=1, le=120,
        description="HTTP timeout in seconds for Places calls"
    )
    google_places_max_retries: int = Field(
        default=2,
        ge=0, le=10,
        description="Maximum retries for transient Places failures"
    )
    places_max_results: int = Field(
        default=5,
        ge=1, le=20,
        description="Number of search results to fetch details for"
    )

    # ===== Cache Configuration =====
    cache_success_ttl_ms: int = Field(
        default=60 * 60 * 1000,
        gt=0,
        description="TTL for successful enrichment lookups (1 hour)"
    )
    cache_failure_ttl_ms: int = Field(
        default=30 * 60 * 1000,
        gt=0,
        description="TTL for failed or not-found enrichment lookups (30 minutes)"
    )
    cache_sweep_interval_seconds: float = Field(
        default=600,
        gt=0,
        description="Interval between background sweeps of expired entries"
    )

    # ===== Metrics Configuration =====
    metrics_capacity: int = Field(
        default=1000,
        ge=1,
        description="Number of recent requests retained by the monitor"
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        ge=1,
        description="Requests slower than this are logged and counted as slow"
    )

    # ===== Database Configuration =====
    database_url: str = Field(
        default="sqlite:///./reva.db",
        description="SQLAlchemy database URL"
    )

    # ===== Application Settings =====
    app_env: str = Field(
        default="development",
        pattern="^(development|staging|production|test)$",
        description="Application environment"
    )
    log_level: str = Field(
        default="info",
        pattern="^(debug|info|warning|error|critical)$",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="Log output format (json for prod, console for dev)"
    )

    # ===== Server Configuration =====
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind host"
    )
    server_port: int = Field(
        default=5000,
        ge=1024, le=65535,
        description="Server port"
    )

    # ===== Security Configuration =====
    cors_origins: Union[str, list[str]] = Field(
        default="",
        description="Allowed CORS origins - comma-separated string or list"
    )
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable per-IP rate limiting on /api routes"
    )
    api_rate_limit: str = Field(
        default="100/15minutes",
        description="Per-IP rate limit for /api routes (limits syntax)"
    )
    jwt_secret: str = Field(
        default=DEV_JWT_SECRET,
        min_length=16,
        description="Secret used to sign access tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    jwt_expire_hours: int = Field(
        default=24,
        ge=1,
        description="Access token lifetime in hours"
    )

    @field_validator("pdl_api_key", "google_places_api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v):
        """Treat empty env vars as an unset key."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @model_validator(mode="after")
    def validate_and_parse_settings(self):
        """Parse cors_origins from string to list and validate production settings."""
        cors_value = self.cors_origins
        if isinstance(cors_value, str):
            if not cors_value or cors_value.strip() == "":
                self.cors_origins = []
            else:
                self.cors_origins = [origin.strip() for origin in cors_value.split(",") if origin.strip()]

        if self.app_env == "production":
            if not self.cors_origins:
                raise ValueError("CORS origins must be configured in production")
            if "*" in self.cors_origins:
                raise ValueError("CORS wildcard not allowed in production")
            if self.jwt_secret == DEV_JWT_SECRET or len(self.jwt_secret) < 32:
                raise ValueError("JWT secret must be at least 32 characters in production")

        if not self.cors_origins:
            self.cors_origins = ["http://localhost:5000"]

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )


# Singleton instance - loaded once at module import
settings = Settings()
