"""Application-wide settings shared by the API server and the chat client."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CHAT_PATH = "/api/openai/chat"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


class AppSettings(BaseSettings):
    """Deployment settings read from unprefixed environment variables."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (dev, staging, or prod)",
    )
    client_base_url: str = Field(
        default="http://localhost:3000",
        description="Frontend origin(s) allowed by CORS, comma separated",
    )
    server_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL the chat client uses to reach this server",
    )

    @property
    def expose_error_details(self) -> bool:
        """Whether error responses may carry diagnostic details."""
        return self.environment != Environment.PRODUCTION

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip().rstrip("/") for o in self.client_base_url.split(",") if o.strip()]

    @property
    def chat_endpoint_url(self) -> str:
        return self.server_base_url.rstrip("/") + CHAT_PATH


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings | None) -> None:
    """Override (or clear with None) the cached application settings."""
    global _app_settings
    _app_settings = settings
