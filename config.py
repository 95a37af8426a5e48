"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The Turnstile secret and the key-value store location are the only
runtime contract the survey endpoint needs; everything else is ambient.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TURNSTILE_VERIFY_URL = "https://challenges.cloudflare.com/turnstile/v0/siteverify"


class TurnstileSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    turnstile_secret_key: str = ""
    turnstile_verify_url: str = TURNSTILE_VERIFY_URL
    turnstile_timeout_seconds: float = 5.0


class KVSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Optional; without Redis, submissions go to an in-process store
    redis_uri: Optional[str] = None
    kv_key_prefix: str = ""
    # None: entries never expire
    kv_ttl_seconds: Optional[int] = None


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "survey-form"
    survey_path: str = "/api/form"

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = None

    # Sub-configs (composed via model_validator below)
    turnstile: Optional[TurnstileSettings] = None
    kv: Optional[KVSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.turnstile is None:
            self.turnstile = TurnstileSettings()
        if self.kv is None:
            self.kv = KVSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
