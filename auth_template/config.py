"""
Client configuration.

Loads client-specific environment variables only.
Safely ignores unrelated server environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client application settings.

    Environment variables must be prefixed with:
        AUTH_TEMPLATE_

    Example:
        AUTH_TEMPLATE_API_BASE_URL=http://localhost:8080/api
    """

    APP_TITLE: str = "Auth Template"

    # --------------------
    # API
    # --------------------
    API_BASE_URL: str = Field(
        default="http://localhost:8080/api",
        description="Base URL for the backend API",
        min_length=1,
    )

    REQUEST_TIMEOUT: float = Field(
        default=10,
        description="Per-request timeout in seconds",
        gt=0,
    )

    # --------------------
    # Appearance
    # --------------------
    APPEARANCE_STORAGE_PATH: str = Field(
        default=".auth-template/appearance.json",
        description="JSON file holding the persisted appearance preference",
    )

    SERVER_PALETTES: bool = Field(
        default=True,
        description="Persist custom palettes on the server while logged in",
    )

    # --------------------
    # UI
    # --------------------
    STORAGE_SECRET: str = "dev-secret"

    # env_prefix keeps client and server variables apart in a shared .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTH_TEMPLATE_",
        extra="ignore",
    )


settings = Settings()
