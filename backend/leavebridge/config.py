from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LeaveBridge"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://leavebridge:leavebridge@db:5432/leavebridge"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    frontend_url: str = "http://localhost:5173"

    # Signs the OAuth state parameter.
    secret_key: str = "change-me-in-production"
    oauth_state_ttl_seconds: int = 600

    http_timeout_seconds: float = 15.0

    # Zoho People OAuth client
    zoho_client_id: str = ""
    zoho_client_secret: str = ""
    zoho_redirect_uri: str = ""
    zoho_accounts_url: str = "https://accounts.zoho.com"
    zoho_people_url: str = "https://people.zoho.com"
    zoho_scopes: list[str] = [
        "ZOHOPEOPLE.leave.READ",
        "ZOHOPEOPLE.attendance.READ",
        "ZOHOPEOPLE.forms.CREATE",
        "ZOHOPEOPLE.leave.ALL",
    ]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
