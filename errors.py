"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors raised while handling a request.
SubmissionError splits failures into the two caller-visible categories:

- ClientError    → 400, short plain-text description
- InternalError  → 500, localized HTML page that reproduces the submitted
                   subject and body so the user does not lose their message

Infrastructure layers raise SecretError / DispatchError; the submission
pipeline translates those into SubmissionError before they reach a handler.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from shared.logging import get_logger

log = get_logger(__name__)

UNRETRIEVABLE = "(Unable to retrieve)"


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class SubmissionError(AppError):
    """A contact form submission could not be relayed."""


class ClientError(SubmissionError):
    """Caused by the caller: missing fields, bad address, rejected solution."""

    status_code = 400

    def __str__(self) -> str:
        return f"Client error: {self.description}"


class InternalError(SubmissionError):
    """Not attributable to the caller. Keeps the message for the error page."""

    status_code = 500

    def __init__(
        self,
        description: str,
        *,
        subject: str = UNRETRIEVABLE,
        body: str = UNRETRIEVABLE,
        language: str = "en",
    ) -> None:
        super().__init__(description)
        self.subject = subject
        self.body = body
        self.language = language

    def __str__(self) -> str:
        return f"Internal error: {self.description}"


# ── Infrastructure errors ─────────────────────────────────────────────────────


class SecretError(Exception):
    """A named secret could not be produced by the secret store."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Secret {name}: {reason}")
        self.name = name
        self.reason = reason


class MissingSecretError(SecretError):
    def __init__(self, name: str) -> None:
        super().__init__(name, "missing")


class SecretStoreError(SecretError):
    """The store itself failed (unreachable, access denied, throttled)."""


class SecretFormatError(SecretError):
    """The secret exists but does not have the expected JSON shape."""


class DispatchError(Exception):
    """The outbound mail transport could not be built or refused the message."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(ClientError)
    async def client_error_handler(
        request: Request, exc: ClientError
    ) -> PlainTextResponse:
        log.warning("contact_form_client_error", description=exc.description)
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.exception_handler(InternalError)
    async def internal_error_handler(
        request: Request, exc: InternalError
    ) -> HTMLResponse:
        log.error("contact_form_internal_error", description=exc.description)
        page = request.app.state.error_presenter.render(
            exc.subject, exc.body, exc.language
        )
        return HTMLResponse(
            page,
            status_code=exc.status_code,
            headers={"Content-Type": "text/html; charset=utf-8"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception", error=str(exc), error_type=type(exc).__name__
        )
        return JSONResponse(
            status_code=500,
            content={"error": "An internal server error occurred.", "code": "internal_error"},
        )
