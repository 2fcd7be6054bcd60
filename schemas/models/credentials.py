"""
Credential models for secrets kept in the secret store.

Both are stored as JSON objects with upper-case keys. The sensitive fields
are excluded from repr so they cannot leak through logging or tracebacks.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CaptchaCredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    sitekey: str = Field(alias="FRIENDLYCAPTCHA_SITEKEY", repr=False)
    secret: str = Field(alias="FRIENDLYCAPTCHA_SECRET", repr=False)


class MailCredentials(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    username: str = Field(alias="SMTP_USERNAME", repr=False)
    password: str = Field(alias="SMTP_PASSWORD", repr=False)
