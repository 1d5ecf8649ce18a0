"""
Application Configuration Module

This module uses Pydantic Settings for type-safe configuration management.

Settings are grouped by concern:
1. Application: name, version, server binding, CORS, logging
2. Persistence: which Review Store adapter to use and where it keeps data
3. Publication: content-addressable storage backends and their credentials

PATTERN: Settings Singleton
===========================
A single Settings instance is cached using @lru_cache, so the .env file
is read once and every module sees the same values.

Usage:
    from reviewchain.config import get_settings

    settings = get_settings()
    print(settings.review_store_backend)
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Names of the publication backends, in fallback order.
PUBLICATION_BACKENDS = ("local-ipfs", "pinata", "web3storage")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically:
    1. Reads from environment variables (case-insensitive)
    2. Falls back to .env file if env var not found
    3. Validates types and raises errors for invalid values

    Credentials for the hosted pinning services default to empty strings.
    An empty credential means "not configured": the matching backend is
    skipped with an error result instead of failing at startup.
    """

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(
        default="Verified Reviews API",
        description="Application name displayed in docs and logs"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (detailed errors, SQL echo)"
    )
    api_version: str = Field(
        default="v1",
        description="API version for URL routing"
    )
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind the server to"
    )
    port: int = Field(
        default=3002,
        description="Port to bind the server to"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # -------------------------------------------------------------------------
    # Persistence Settings
    # -------------------------------------------------------------------------
    review_store_backend: str = Field(
        default="sql",
        description="Review Store adapter: sql, json or memory"
    )
    database_url: str = Field(
        default="sqlite:///./data/reviews.db",
        description="SQLAlchemy connection URL for the sql store"
    )
    db_pool_size: int = Field(
        default=5,
        description="Number of permanent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Maximum additional connections during high load"
    )
    data_dir: str = Field(
        default="./data",
        description="Directory holding reviews.json and metadata.json for the json store"
    )

    # -------------------------------------------------------------------------
    # Publication Settings
    # -------------------------------------------------------------------------
    publication_enabled: bool = Field(
        default=True,
        description="Attempt to publish accepted reviews to content-addressable storage"
    )
    preferred_publication_backend: str = Field(
        default="local-ipfs",
        description="Backend tried first; the others are used as fallbacks"
    )
    publication_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout for a single backend upload attempt"
    )
    verify_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Request timeout for gateway read-back"
    )
    default_gateway_url: str = Field(
        default="https://ipfs.io/ipfs/",
        description="Gateway used by the verify endpoint when none is given"
    )

    ipfs_local_url: str = Field(
        default="http://localhost:5001/api/v0",
        description="HTTP API of the local IPFS node"
    )
    ipfs_local_enabled: bool = Field(
        default=True,
        description="Whether the local IPFS node backend may be used"
    )

    pinata_api_key: str = Field(default="", description="Pinata API key (JWT)")
    pinata_secret_key: str = Field(default="", description="Pinata secret key")
    pinata_base_url: str = Field(
        default="https://api.pinata.cloud",
        description="Pinata API base URL"
    )

    web3storage_api_key: str = Field(default="", description="Web3.Storage API token")
    web3storage_base_url: str = Field(
        default="https://api.web3.storage",
        description="Web3.Storage API base URL"
    )

    # -------------------------------------------------------------------------
    # Logging Settings
    # -------------------------------------------------------------------------
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate that log_level is a valid Python logging level.

        Args:
            v: The value to validate

        Returns:
            The validated value (uppercase)

        Raises:
            ValueError: If log level is invalid
        """
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        valid_envs = {"development", "staging", "production"}
        if v.lower() not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return v.lower()

    @field_validator("review_store_backend")
    @classmethod
    def validate_review_store_backend(cls, v: str) -> str:
        """Validate the store adapter name."""
        valid_backends = {"sql", "json", "memory"}
        if v.lower() not in valid_backends:
            raise ValueError(f"review_store_backend must be one of {valid_backends}")
        return v.lower()

    @field_validator("preferred_publication_backend")
    @classmethod
    def validate_preferred_publication_backend(cls, v: str) -> str:
        """Validate the preferred backend is one the client knows about."""
        if v.lower() not in PUBLICATION_BACKENDS:
            raise ValueError(
                f"preferred_publication_backend must be one of {PUBLICATION_BACKENDS}"
            )
        return v.lower()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    The first call creates the Settings instance (reading .env and
    validating); later calls return the same object.

    Returns:
        Cached Settings instance
    """
    return Settings()
