"""Application settings using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # AWS configuration (CloudFront, WAF and edge functions live in us-east-1)
    cdk_default_account: str | None = None
    cdk_default_region: str = "us-east-1"

    # Deployment
    environment: str = "dev"
    resource_prefix: str = "static-sites"

    # Site definitions
    sites_file_path: str = "config/sites.json"

    # Feature flags
    debug: bool = False

    @property
    def sites_file(self) -> Path:
        """Get site definitions path as Path object."""
        return Path(self.sites_file_path)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
