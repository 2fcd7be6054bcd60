"""
FastAPI application factory.
create_app() is the single entry point for building the app.

Collaborators can be injected for tests and local development:
- secret_source:           defaults to AWS Secrets Manager
- captcha_transport:       httpx transport for the verification API
- mail_transport_factory:  builds the mail transport from endpoint + credentials
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.friendlycaptcha import FriendlyCaptchaVerifier
from infrastructure.email.smtp import SmtpTransport
from infrastructure.http_client import HttpClient
from infrastructure.secrets.aws import AwsSecretsManagerSource
from infrastructure.secrets.protocol import SecretSource
from routes.contact_routes import router as contact_router
from routes.health_routes import router as health_router
from services.error_page import ErrorPagePresenter
from services.mail_dispatcher import MailDispatcher, TransportFactory
from services.submission_pipeline import SubmissionPipeline
from shared.logging import setup_logging


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    secret_source: Optional[SecretSource] = None,
    captcha_transport: Optional[httpx.AsyncBaseTransport] = None,
    mail_transport_factory: TransportFactory = SmtpTransport,
) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        secrets = secret_source
        if secrets is None:
            secrets = AwsSecretsManagerSource.open(settings.secrets)

        http_client = HttpClient(
            timeout=settings.captcha.friendlycaptcha_timeout_seconds,
            transport=captcha_transport,
        )
        verifier = FriendlyCaptchaVerifier(
            secrets,
            http_client,
            verify_url=settings.captcha.friendlycaptcha_verify_url,
            secret_name=settings.captcha.friendlycaptcha_secret_name,
        )
        dispatcher = MailDispatcher(
            secrets, settings.mail, transport_factory=mail_transport_factory
        )

        app.state.settings = settings
        app.state.captcha_verifier = verifier
        app.state.mail_dispatcher = dispatcher
        app.state.pipeline = SubmissionPipeline(verifier, dispatcher, settings.mail)
        app.state.error_presenter = ErrorPagePresenter(site_root=settings.site_root)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "GET"],
        allow_headers=["Content-Type"],
    )

    register_error_handlers(app)
    app.include_router(contact_router)
    app.include_router(health_router)

    return app
