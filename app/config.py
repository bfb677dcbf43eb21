# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Legacy HS256 secret used to verify Supabase Auth tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (Celery broker + stream fan-out)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker and pub/sub"
    )

    # -------------------------------------------------------------------------
    # OpenAI Configuration (filing similarity)
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for similarity comparisons"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Chat model used to compare filings"
    )

    # -------------------------------------------------------------------------
    # Similarity Analysis
    # -------------------------------------------------------------------------

    SIMILARITY_CALL_DELAY_SECONDS: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Pause between consecutive comparison calls in a batch"
    )

    SIMILARITY_MAX_RETRIES: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per comparison when the AI endpoint is rate limited"
    )

    SIMILARITY_FLAG_THRESHOLD: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Overall score at or above which a match is flagged"
    )

    # -------------------------------------------------------------------------
    # Ledger (smart contract recording IP filing decisions)
    # -------------------------------------------------------------------------
    # Leave LEDGER_RPC_URL / LEDGER_CONTRACT_ADDRESS / LEDGER_PRIVATE_KEY empty
    # to disable on-chain recording.

    LEDGER_RPC_URL: str = Field(
        default="",
        description="JSON-RPC endpoint of the chain holding the IPR contract"
    )

    LEDGER_CONTRACT_ADDRESS: str = Field(
        default="",
        description="Address of the deployed IPR contract"
    )

    LEDGER_PRIVATE_KEY: str = Field(
        default="",
        description="Private key of the reviewer account that signs decisions"
    )

    LEDGER_CHAIN_ID: int = Field(
        default=11155111,
        description="Chain id used when signing (default: Sepolia)"
    )

    LEDGER_RECEIPT_TIMEOUT_SECONDS: int = Field(
        default=120,
        ge=1,
        le=1800,
        description="How long to wait for a transaction receipt"
    )

    LEDGER_EXPLORER_URL: str = Field(
        default="https://sepolia.etherscan.io",
        description="Block explorer base URL for transaction links"
    )

    # -------------------------------------------------------------------------
    # Messaging
    # -------------------------------------------------------------------------

    MESSAGE_POLL_LIMIT: int = Field(
        default=200,
        ge=1,
        le=1000,
        description="Maximum messages returned by one poll"
    )

    STREAM_KEEPALIVE_SECONDS: float = Field(
        default=15.0,
        gt=0,
        le=300,
        description="Interval between keepalive comments on idle message streams"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (production sets env vars directly)
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def ledger_enabled(self) -> bool:
        """True when every value needed to sign ledger transactions is set."""
        return bool(
            self.LEDGER_RPC_URL
            and self.LEDGER_CONTRACT_ADDRESS
            and self.LEDGER_PRIVATE_KEY
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
