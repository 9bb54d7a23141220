"""
Configuration management using Pydantic Settings.
Loads settings from environment variables and .env files.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    """Completion API configuration settings."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_", env_file=".env", extra="ignore")

    api_key: str = Field(default="", description="OpenAI API key")
    model: str = Field(default="gpt-4.1-mini", description="Chat completion model")
    temperature: float = Field(default=0.2, description="Sampling temperature")
    timeout: int = Field(default=120, description="Request timeout in seconds")
    max_retries: int = Field(default=2, description="SDK-level retries")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip())


class AtlassianSettings(BaseSettings):
    """
    Default Confluence/Jira connection values.

    Every value can be overridden per request; see
    src.atlassian.credentials.resolve_credentials.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    confluence_base_url: str = Field(
        default="", validation_alias=AliasChoices("CONFLUENCE_BASE_URL")
    )
    jira_base_url: str = Field(default="", validation_alias=AliasChoices("JIRA_BASE_URL"))
    email: str = Field(
        default="",
        validation_alias=AliasChoices("ATLASSIAN_EMAIL", "JIRA_EMAIL", "CONFLUENCE_EMAIL"),
    )
    api_token: str = Field(
        default="",
        validation_alias=AliasChoices(
            "ATLASSIAN_API_TOKEN", "JIRA_API_TOKEN", "CONFLUENCE_API_TOKEN"
        ),
    )
    domain: str = Field(default="", validation_alias=AliasChoices("ATLASSIAN_DOMAIN"))
    timeout: int = Field(default=30, validation_alias=AliasChoices("ATLASSIAN_TIMEOUT"))

    def as_env(self) -> dict[str, str]:
        """Expose the values under the canonical environment variable names."""
        return {
            "CONFLUENCE_BASE_URL": self.confluence_base_url,
            "JIRA_BASE_URL": self.jira_base_url,
            "ATLASSIAN_EMAIL": self.email,
            "ATLASSIAN_API_TOKEN": self.api_token,
            "ATLASSIAN_DOMAIN": self.domain,
        }


class EmailSettings(BaseSettings):
    """SMTP configuration for the e-mail delivery endpoint."""

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_", env_file=".env", extra="ignore", populate_by_name=True
    )

    host: str = Field(default="", description="SMTP host")
    port: Optional[int] = Field(default=None, description="SMTP port")
    user: str = Field(default="", description="SMTP user")
    password: str = Field(
        default="", validation_alias=AliasChoices("EMAIL_PASS", "EMAIL_PASSWORD")
    )
    secure: bool = Field(default=False, description="Implicit TLS (SMTPS) instead of STARTTLS")
    from_address: str = Field(default="", validation_alias=AliasChoices("EMAIL_FROM"))
    timeout: int = Field(default=30, description="SMTP timeout in seconds")

    @field_validator("port", mode="before")
    @classmethod
    def blank_port_is_unset(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.port and self.user and self.password)

    @property
    def missing(self) -> list[str]:
        values = {
            "EMAIL_HOST": self.host,
            "EMAIL_PORT": self.port,
            "EMAIL_USER": self.user,
            "EMAIL_PASS": self.password,
        }
        return [name for name, value in values.items() if not value]


class StorageSettings(BaseSettings):
    """Local storage for generated files and the optional front-end bundle."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    generated_dir: str = Field(
        default="generated", validation_alias=AliasChoices("GENERATED_DIR")
    )
    static_dir: str = Field(default="", validation_alias=AliasChoices("STATIC_DIR"))


class SecuritySettings(BaseSettings):
    """Security configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    allowed_origins: str = Field(
        default="*",
        validation_alias=AliasChoices("ALLOWED_ORIGINS", "SECURITY_ALLOWED_ORIGINS"),
        description="CORS allowed origins (comma-separated, or *)",
    )

    @property
    def origins(self) -> list[str]:
        if self.allowed_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="pm-doc-automation", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=True, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # Sub-settings
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    atlassian: AtlassianSettings = Field(default_factory=AtlassianSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"app_env must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience function for accessing settings
settings = get_settings()
