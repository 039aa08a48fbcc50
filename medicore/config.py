"""Configuration management for MediCore."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MEDICORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production"] = Field(
        default="production",
        description="Deployment environment; degraded fallbacks are refused in production",
    )

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Auth
    jwt_secret: str = Field(
        default="change-me",
        description="Secret used to sign access tokens",
    )
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=480)
    cookie_secure: bool = Field(default=True)
    cookie_domain: str = Field(default="")

    # Demo accounts (superadmin, doctor1, nurse1, ...)
    demo_accounts_enabled: bool = Field(
        default=False,
        description="Seed the user directory with one demo account per role",
    )
    demo_password: str = Field(default="123456")

    # Attachments
    attachment_upload_url: str = Field(
        default="",
        description="Endpoint accepting multipart uploads and answering {'url': ...}",
    )
    attachment_timeout: int = Field(default=30, description="Upload timeout in seconds")
    max_image_bytes: int = Field(default=5 * 1024 * 1024)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_attachment_uploader(self) -> bool:
        """Check if a network attachment endpoint is configured."""
        return bool(self.attachment_upload_url)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
