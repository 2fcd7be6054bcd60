"""
Request DTOs for the contact form endpoint.

RawSubmission:       POST /contact body, every field optional and untrusted
ValidatedSubmission: produced only by SubmissionPipeline.validate()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RawSubmission(BaseModel):
    """Request body for POST /contact.

    The CAPTCHA widget posts its solution under the hyphenated key
    ``frc-captcha-solution``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    language: Optional[str] = None
    solution: Optional[str] = Field(default=None, alias="frc-captcha-solution")


@dataclass(frozen=True)
class ValidatedSubmission:
    email: str
    subject: str
    body: str
    language: str
    solution: str
    name: Optional[str] = None
