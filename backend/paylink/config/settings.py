"""
PURPOSE: Configuration settings for the GH Paylink relay.

This module uses Pydantic Settings to manage configuration from environment
variables and .env files. A Settings instance is built once at startup and
handed to the components that need it.
"""

from typing import ClassVar

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_CURRENCY


class Settings(BaseSettings):
    """
    PURPOSE: Central configuration class for GH Paylink.

    Holds the Flutterwave credentials, the database connection string and
    the HTTP server options. None of the credentials has a usable default;
    missing ones are reported by get_missing_required() so the process can
    still boot and answer health checks.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Flutterwave Gateway
    FLW_SECRET_KEY: str = ""
    # Shared secret Flutterwave sends back in the verif-hash header
    FLW_SECRET_HASH: str = ""
    FLW_BASE_URL: str = "https://api.flutterwave.com/v3"
    GATEWAY_TIMEOUT_SECONDS: float = 30.0
    FRONTEND_SUCCESS_URL: str = "https://unrivaled-granita-5b2b9b.netlify.app/success.html"
    DEFAULT_CURRENCY: str = DEFAULT_CURRENCY

    # Database
    DATABASE_URL: str = ""
    AUTO_CREATE_SCHEMA: bool = True

    # Server
    PORT: int = 3000
    CORS_ORIGINS: list[str] = ["*"]
    RATE_LIMIT_ENABLED: bool = True

    # System
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Settings whose absence is reported at startup
    _REQUIRED: ClassVar[tuple[str, ...]] = ("FLW_SECRET_KEY", "FLW_SECRET_HASH", "DATABASE_URL")

    def is_production(self) -> bool:
        """
        PURPOSE: Determine whether the app is running in production mode.

        Returns:
            bool: True when APP_ENV indicates production.
        """
        return self.APP_ENV.strip().lower() in {"prod", "production"}

    def get_missing_required(self) -> list[str]:
        """
        PURPOSE: Return the names of required settings that are unset or blank.

        CALLED BY: Application startup, to log a warning per missing value.

        Returns:
            list[str]: Setting names with empty values.
        """
        return [name for name in self._REQUIRED if not str(getattr(self, name)).strip()]

    @property
    def database_configured(self) -> bool:
        return bool(self.DATABASE_URL.strip())


def get_settings() -> Settings:
    """Build a Settings instance from the current environment."""
    return Settings()
