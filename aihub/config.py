"""
AI Hub Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
Provider credentials use SecretStr to prevent accidental logging; every
credential is optional because a provider without a key simply fails
dispatch and triggers the fallback path.
"""

from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def provider_of(model_id: str) -> str:
    """Provider prefix of a "<provider>/<modelName>" id."""
    return model_id.partition("/")[0]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    groq_api_key: SecretStr | None = Field(
        default=None, description="Groq API key (primary low-cost provider)"
    )

    xai_api_key: SecretStr | None = Field(
        default=None, description="xAI API key (fixed fallback provider)"
    )

    openai_api_key: SecretStr | None = Field(default=None, description="OpenAI API key")

    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key"
    )

    mistral_api_key: SecretStr | None = Field(default=None, description="Mistral API key")

    cohere_api_key: SecretStr | None = Field(default=None, description="Cohere API key")

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Connection URL of the key/value store backing the response cache",
    )

    cache_namespace: str = Field(
        default="ai-hub:cache",
        min_length=1,
        description="Prefix prepended to every cache key",
    )

    cache_ttl_seconds: int = Field(
        default=60 * 60 * 24,  # 24 hours
        gt=0,
        description="Expiry applied to cached generation text",
    )

    default_model: str = Field(
        default="groq/llama3-8b",
        description="Catalog entry returned when no model matches the requested capability",
    )

    fallback_model: str = Field(
        default="xai/grok-1",
        description="Fixed backend tried once when the primary dispatch fails",
    )

    secondary_fallback_model: str = Field(
        default="groq/llama3-8b",
        description="Backend tried instead of fallback_model when the primary shares its provider",
    )

    dispatch_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout for a single chat-completion call",
    )

    track_costs: bool = Field(
        default=True, description="Enable cost estimation and metrics recording"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("default_model", "fallback_model", "secondary_fallback_model")
    @classmethod
    def validate_model_id(cls, v: str) -> str:
        """Ensure model ids follow the <provider>/<modelName> format."""
        provider, _, name = v.partition("/")
        if not provider or not name:
            raise ValueError("model id must have the form '<provider>/<modelName>'")
        return v

    @model_validator(mode="after")
    def validate_fallback_providers(self) -> "Settings":
        """The two fallback targets must live on different providers."""
        if provider_of(self.fallback_model) == provider_of(self.secondary_fallback_model):
            raise ValueError(
                "fallback_model and secondary_fallback_model must use different providers"
            )
        return self

    def fallback_for(self, primary_provider: str) -> str:
        """
        Return the fallback target for a failed primary.

        Args:
            primary_provider: Provider of the model that just failed

        Returns:
            fallback_model, or secondary_fallback_model when fallback_model
            is served by the same provider as the primary.
        """
        if provider_of(self.fallback_model) == primary_provider:
            return self.secondary_fallback_model
        return self.fallback_model

    def api_key_for(self, provider: str) -> str | None:
        """
        Return the plain credential for a provider, if configured.

        Args:
            provider: Provider identifier (e.g. "groq")

        Returns:
            The API key string, or None when unset or empty.
        """
        secret: SecretStr | None = getattr(self, f"{provider}_api_key", None)
        if secret is None:
            return None
        return secret.get_secret_value() or None


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and reduces noise
    from third-party HTTP and store client libraries.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("groq").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)
