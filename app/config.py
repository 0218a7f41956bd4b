"""
Application configuration using Pydantic Settings.
Loads environment variables and provides type-safe configuration.
"""

from typing import List, Optional
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, validator
from pathlib import Path

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "infrastructure" / "email" / "templates"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        # .env.local wins over .env
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", description="Current environment")
    debug: bool = Field(default=False, description="Debug mode")

    # Database
    database_url: Optional[str] = Field(default=None, description="PostgreSQL connection string")

    # SMTP transport
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: Optional[int] = Field(default=None)
    smtp_user: Optional[str] = Field(default=None)
    smtp_pass: Optional[str] = Field(default=None)
    smtp_secure: bool = Field(default=False)
    smtp_timeout: float = Field(default=30.0)
    from_email: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("from_email", "mail_from"),
    )

    # Email rendering
    email_transport: str = Field(default="smtp", description="smtp or memory")
    email_templates_dir: Path = Field(default=DEFAULT_TEMPLATES_DIR)
    email_template_extension: str = Field(default=".html")
    email_default_lang: str = Field(default="de")
    email_languages: str | List[str] = Field(default=["de", "en"])

    @validator("email_languages", pre=True)
    def parse_email_languages(cls, v):
        """Parse email languages from comma-separated string or list."""
        if isinstance(v, str):
            if not v or v.strip() == "":
                return ["de", "en"]
            return [lang.strip() for lang in v.split(",") if lang.strip()]
        elif v is None:
            return ["de", "en"]
        return v

    @validator("smtp_host", "smtp_port", "smtp_user", "smtp_pass", "from_email", "database_url", pre=True)
    def blank_to_none(cls, v):
        """Treat empty environment values as unset."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment.lower() == "testing"

    @property
    def smtp_configured(self) -> bool:
        """Host and port are the minimum for an SMTP transport."""
        return bool(self.smtp_host) and self.smtp_port is not None

    def validate_environment(self) -> None:
        """Validate that all required environment variables are set."""
        required_vars = ["database_url", "smtp_host", "smtp_port"]
        if self.email_transport == "memory":
            required_vars = ["database_url"]

        missing_vars = []
        for var in required_vars:
            if getattr(self, var, None) in (None, ""):
                missing_vars.append(var.upper())

        if missing_vars:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use this function to get settings throughout the application.
    """
    settings = Settings()

    # Validate environment in production
    if settings.is_production:
        settings.validate_environment()

    return settings


# Create a global settings instance
settings = get_settings()
