"""Application configuration using Pydantic Settings."""

from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# NOTE: logfire.configure() is intentionally not called here.
# Logfire is configured once at application startup (main.py via observability/logfire_config.py)
# or in pytest hooks (conftest.py).


def _split_options(value: str) -> List[str]:
    return [option.strip() for option in value.split(",") if option.strip()]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are validated at startup to ensure the application
    has the required configuration before it starts.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode (exposes raw error text in responses)")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Settings
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    # Language model provider
    openai_api_key: str = Field(..., description="Bearer token for the chat-completions endpoint")
    openai_api_url: str = Field(default="", description="Override for the chat-completions URL")
    openai_model: str = Field(default="gpt-4o-mini", description="Model identifier")
    max_tokens: int = Field(default=2000, ge=1, description="max_completion_tokens sent to the provider")
    default_creativity: str = Field(default="medium", description="Creativity used when a request value is unmapped")
    provider_timeout: float = Field(default=60.0, gt=0, description="Provider request timeout in seconds")

    # Selectable options offered to the compose form
    style_options: str = Field(
        default="formal, professional, casual, friendly, enthusiastic, persuasive, assertive",
        description="Comma-separated list of allowed email styles"
    )
    length_options: str = Field(default="short, medium, long", description="Comma-separated list of allowed lengths")
    creativity_options: str = Field(default="low, medium, high", description="Comma-separated list of creativity levels")
    language_options: str = Field(
        default="English, German, French, Spanish, Italian, Portuguese, Dutch, Bosnian, Croatian, Serbian",
        description="Comma-separated list of allowed languages"
    )

    # Input limits
    structural_cap: int = Field(default=10_000, ge=1, description="Hard upper bound for any form field")
    content_cap: int = Field(default=2_000, ge=1, description="Upper bound for scanned free text before truncation")
    strict_free_text: bool = Field(
        default=False,
        description="Block instead of sanitize injection hits in conversation and fix fields"
    )

    # Caller identity
    trust_forwarded_headers: bool = Field(
        default=False,
        description="Honor X-Forwarded-For / X-Real-IP when deriving caller identity"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Observability
    logfire_token: str = Field(default="", description="Logfire observability token")

    @field_validator("allowed_origins")
    @classmethod
    def parse_origins(cls, v: str) -> List[str]:
        """Parse comma-separated origins into a list."""
        if isinstance(v, str):
            return _split_options(v)
        return v

    @field_validator("default_creativity")
    @classmethod
    def normalize_creativity(cls, v: str) -> str:
        """Creativity levels are matched lower-case."""
        return v.strip().lower()

    @property
    def styles(self) -> List[str]:
        return _split_options(self.style_options)

    @property
    def lengths(self) -> List[str]:
        return _split_options(self.length_options)

    @property
    def creativities(self) -> List[str]:
        return _split_options(self.creativity_options)

    @property
    def languages(self) -> List[str]:
        return _split_options(self.language_options)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @property
    def expose_debug(self) -> bool:
        """Raw error text is only ever returned outside production."""
        return self.debug and not self.is_production


# Create a singleton instance
settings = Settings()


def get_settings() -> "Settings":
    """Return the singleton settings instance."""
    return settings
