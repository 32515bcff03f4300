"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Uses the mock payment service (no API keys needed)
    - STAGING: Uses Stripe with test keys
    - PRODUCTION: Uses Stripe with live keys

The ENV_MODE variable controls which payment service is instantiated,
so the whole checkout flow can be exercised locally without a Stripe account.

Usage:
    from bistro.core.config import get_settings

    settings = get_settings()
    client = MongoClient(settings.mongodb_url)

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the mock payment service
        PRODUCTION: Live environment with real Stripe keys
        STAGING: Pre-production testing with Stripe test keys
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    Secrets (token secret, Stripe key, database password) should NEVER be
    committed to version control.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Bistro Boss",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=5001,
        description="API server port"
    )
    api_prefix: str = Field(
        default="/api/v1",
        description="Path prefix shared by all API routes"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    mongodb_uri: Optional[str] = Field(
        default=None,
        description="Full MongoDB connection string (overrides DB_USER/DB_PASS)"
    )
    db_user: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas user"
    )
    db_pass: Optional[str] = Field(
        default=None,
        description="MongoDB Atlas password"
    )
    db_cluster: str = Field(
        default="cluster0.esabfel.mongodb.net",
        description="MongoDB Atlas cluster host"
    )
    database_name: str = Field(
        default="bistroDB",
        description="Database holding the bistro collections"
    )
    db_timeout_ms: int = Field(
        default=5000,
        description="Server selection timeout in milliseconds"
    )

    # ==========================================================================
    # AUTH TOKENS
    # ==========================================================================

    access_token_secret: str = Field(
        default="dev-only-insecure-secret-change-me",
        description="Secret used to sign session tokens"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Token signing algorithm"
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Token lifetime in minutes"
    )

    # ==========================================================================
    # STRIPE PAYMENT GATEWAY
    # ==========================================================================

    stripe_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe API secret key (sk_live_... or sk_test_...)"
    )
    stripe_currency: str = Field(
        default="usd",
        description="Default currency for payments"
    )
    payment_min_amount: int = Field(
        default=1,
        ge=1,
        description="Smallest chargeable amount in minor currency units"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Normalize the prefix to '/segment' with no trailing slash."""
        v = "/" + v.strip("/")
        return "" if v == "/" else v

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def mongodb_url(self) -> str:
        """
        Connection string for the MongoDB client.

        An explicit MONGODB_URI wins. Otherwise an Atlas SRV URI is assembled
        from DB_USER/DB_PASS, falling back to a local server.
        """
        if self.mongodb_uri:
            return self.mongodb_uri
        if self.db_user and self.db_pass:
            return (
                f"mongodb+srv://{quote_plus(self.db_user)}:{quote_plus(self.db_pass)}"
                f"@{self.db_cluster}/?retryWrites=true&w=majority"
            )
        return "mongodb://localhost:27017"

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Validate that all required production settings are configured.

        Returns:
            List of missing configuration keys (empty if all present)
        """
        missing = []

        if self.use_real_services:
            if not self.stripe_secret_key:
                missing.append("STRIPE_SECRET_KEY")
            if self.access_token_secret == Settings.model_fields["access_token_secret"].default:
                missing.append("ACCESS_TOKEN_SECRET")
            if not (self.mongodb_uri or (self.db_user and self.db_pass)):
                missing.append("MONGODB_URI")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once per process and shared for the application
    lifecycle.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)

    return logging.getLogger("bistro")

