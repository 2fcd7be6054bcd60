"""
Contact form endpoint.

POST /contact: relays a contact form submission as an email. The body is
either a urlencoded HTML form post or a JSON object.

- success        → 303 to the localized "email sent" page
- ClientError    → 400 plain text (errors.register_error_handlers)
- InternalError  → 500 localized HTML page with the submitted message
"""

from __future__ import annotations

import json
import re

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError as PydanticValidationError

from config import AppSettings
from dependencies import get_pipeline, get_settings
from errors import ClientError, InternalError
from schemas.dto.requests.contact import RawSubmission
from services.submission_pipeline import SubmissionPipeline

router = APIRouter(tags=["contact"])

# Language codes that may be embedded into the success page file name
_LANGUAGE_RE = re.compile(r"^[a-z]{2}(-[a-z]{2})?$", re.IGNORECASE)

_FORM_TYPE = "application/x-www-form-urlencoded"
_JSON_TYPE = "application/json"


def success_url(settings: AppSettings, language: str) -> str:
    if language == "en" or not _LANGUAGE_RE.match(language):
        return f"{settings.site_root}/email-sent.html"
    return f"{settings.site_root}/email-sent.{language}.html"


async def parse_submission(request: Request) -> RawSubmission:
    """Decode the body as a form post or a JSON object, chosen by Content-Type."""
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";", 1)[0].strip().lower()

    if media_type == _FORM_TYPE:
        form = await request.form()
        data = dict(form)
    elif media_type == _JSON_TYPE:
        payload = await request.body()
        if not payload.strip():
            raise InternalError("Missing event payload")
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ClientError("Malformed request payload") from e
        if not isinstance(data, dict):
            raise ClientError("Malformed request payload")
    else:
        raise InternalError("Missing event payload")

    try:
        return RawSubmission.model_validate(data)
    except PydanticValidationError as e:
        raise ClientError("Malformed fields in request") from e


@router.post("/contact")
async def send_contact_form_message(
    raw: RawSubmission = Depends(parse_submission),
    pipeline: SubmissionPipeline = Depends(get_pipeline),
    settings: AppSettings = Depends(get_settings),
) -> RedirectResponse:
    language = await pipeline.process(raw)
    return RedirectResponse(success_url(settings, language), status_code=303)
