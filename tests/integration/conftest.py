"""Fixtures that build the full application around the fakes in tests/conftest.py."""

from typing import Callable

import pytest
from fastapi import FastAPI

from app import create_app
from config import AppSettings, CaptchaSettings, MailSettings


@pytest.fixture
def build_app(fake_captcha, mail_recorder, secret_source) -> Callable[..., FastAPI]:
    def _build(smtp_url: str = "smtp://localhost:2525") -> FastAPI:
        settings = AppSettings(
            mail=MailSettings(smtp_url=smtp_url),
            captcha=CaptchaSettings(friendlycaptcha_verify_url="http://friendlycaptcha.test/verify"),
        )
        return create_app(
            settings,
            secret_source=secret_source,
            captcha_transport=fake_captcha.transport,
            mail_transport_factory=mail_recorder.factory,
        )

    return _build
