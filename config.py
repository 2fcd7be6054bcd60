"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The three endpoint overrides recognised by the handler map directly onto
field names: FRIENDLYCAPTCHA_VERIFY_URL, SMTP_URL and AWS_ENDPOINT_URL.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    friendlycaptcha_verify_url: str = (
        "https://api.friendlycaptcha.com/api/v1/siteverify"
    )
    friendlycaptcha_secret_name: str = "friendlycaptcha-data"
    friendlycaptcha_timeout_seconds: float = 5.0


class MailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Credentials are only fetched for smtps:// endpoints
    smtp_url: str = "smtps://email-smtp.eu-north-1.amazonaws.com"
    smtp_credentials_name: str = "smtp-ses-credentials"
    smtp_timeout_seconds: float = 10.0

    mail_from: str = "Web contact form <noreply@hovinen.tech>"
    mail_to: str = "Bradford Hovinen <bradford@hovinen.tech>"


class SecretStoreSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # LocalStack and friends; None means the regular AWS endpoint
    aws_endpoint_url: Optional[str] = None
    aws_region: str = "eu-north-1"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    # "json" or "console"; unset means json in production, console elsewhere
    log_format: Optional[str] = None


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "contact-form-relay"

    # Host serving the static site (success pages, error page assets)
    base_host: str = "hovinen.tech"

    cors_origins: list[str] = ["https://hovinen.tech"]

    # OpenAPI docs URL (None disables the docs UI)
    docs_url: Optional[str] = None

    # Sub-configs (composed via model_validator below)
    captcha: Optional[CaptchaSettings] = None
    mail: Optional[MailSettings] = None
    secrets: Optional[SecretStoreSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.captcha is None:
            self.captcha = CaptchaSettings()
        if self.mail is None:
            self.mail = MailSettings()
        if self.secrets is None:
            self.secrets = SecretStoreSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.logging.log_format is None:
            self.logging = self.logging.model_copy(
                update={"log_format": "json" if self.is_production else "console"}
            )
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def site_root(self) -> str:
        return f"https://{self.base_host}"
