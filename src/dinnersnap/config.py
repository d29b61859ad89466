"""
DinnerSnap - Configuration and settings.

Settings are read once from the environment (and .env) into a frozen model
that is passed explicitly into the orchestrator and providers. Every
provider credential is optional: a missing key degrades that provider to
"skipped" rather than failing the request.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide, read-only configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Provider credentials
    gcv_key: SecretStr | None = None
    spoon_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("spoon_key", "spoonacular_key"),
    )
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"

    # Time budgets (seconds)
    vision_timeout_seconds: float = Field(default=2.5, gt=0)
    search_timeout_seconds: float = Field(default=2.0, gt=0)
    generative_timeout_seconds: float = Field(default=8.0, gt=0)
    watchdog_seconds: float = Field(default=12.0, gt=0)  # Below the host's 25s limit

    provider_retries: int = Field(default=1, ge=0, le=1)
    max_recipes: int = Field(default=3, ge=1)
    max_body_bytes: int = 3_500_000  # ~2.6 MB image once base64-encoded

    # Application
    dinnersnap_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # DINNERSNAP_LOG_PROMPTS=1 - log generative prompts to local files (dev only)
    dinnersnap_log_prompts: bool = False

    @model_validator(mode="after")
    def _check_budgets(self) -> "Settings":
        if self.generative_timeout_seconds >= self.watchdog_seconds:
            raise ValueError("generative_timeout_seconds must be below watchdog_seconds")
        if self.search_timeout_seconds >= self.watchdog_seconds:
            raise ValueError("search_timeout_seconds must be below watchdog_seconds")
        # Vision runs first, then search and generative side by side
        worst_case = self.vision_timeout_seconds + max(
            self.search_timeout_seconds, self.generative_timeout_seconds
        )
        if worst_case >= self.watchdog_seconds:
            raise ValueError(
                "vision_timeout_seconds plus the slower recipe budget must be below watchdog_seconds"
            )
        return self

    @property
    def has_vision(self) -> bool:
        return _present(self.gcv_key)

    @property
    def has_search(self) -> bool:
        return _present(self.spoon_key)

    @property
    def has_generative(self) -> bool:
        return _present(self.openai_api_key)

    @property
    def is_development(self) -> bool:
        return self.dinnersnap_env == "development"


def _present(secret: SecretStr | None) -> bool:
    return secret is not None and bool(secret.get_secret_value().strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

