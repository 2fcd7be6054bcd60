"""
Shared test fixtures.

No test talks to a real service:
- FakeFriendlyCaptcha is an httpx.MockTransport handler that behaves like the
  FriendlyCaptcha siteverify API
- MailTransportRecorder builds in-memory mail transports that record what
  they were asked to send
- secrets live in an InMemorySecretSource
"""

from __future__ import annotations

import json
from email.message import EmailMessage
from typing import Optional

import httpx
import pytest

from config import MailSettings
from infrastructure.email.smtp import SmtpEndpoint
from infrastructure.secrets.memory import InMemorySecretSource
from schemas.models.credentials import MailCredentials

FAKE_SITEKEY = "arbitrary sitekey"
FAKE_SECRET = "arbitrary secret"
CORRECT_SOLUTION = "correct captcha solution"

CAPTCHA_SECRET_NAME = "friendlycaptcha-data"
SMTP_SECRET_NAME = "smtp-ses-credentials"

FAKE_VERIFY_URL = "http://friendlycaptcha.test/verify"

_ENV_VARS = (
    "FRIENDLYCAPTCHA_VERIFY_URL",
    "SMTP_URL",
    "AWS_ENDPOINT_URL",
    "ENV",
    "LOG_FORMAT",
    "SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep the developer's .env and exported overrides out of every test."""
    monkeypatch.chdir(tmp_path)
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


# ── FriendlyCaptcha ───────────────────────────────────────────────────────────


class FakeFriendlyCaptcha:
    """Checks sitekey, secret and (optionally) the solution like the real API.

    mode switches the whole service into a failure behaviour:
    "invalid_response", "solution_timeout", "server_error", "unreachable".
    """

    def __init__(self, sitekey: str = FAKE_SITEKEY, secret: str = FAKE_SECRET) -> None:
        self.required_sitekey = sitekey
        self.required_secret = secret
        self.required_solution: Optional[str] = None
        self.mode = "normal"
        self.requests: list[dict] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.mode == "unreachable":
            raise httpx.ConnectError("connection refused", request=request)

        payload = json.loads(request.content)
        self.requests.append(payload)

        if self.mode == "invalid_response":
            return httpx.Response(
                200, text="Invalid response", headers={"Content-Type": "text/plain"}
            )
        if self.mode == "server_error":
            return httpx.Response(503, text="Service unavailable")
        if self.mode == "solution_timeout":
            return self._json(200, False, ["solution_timeout_or_duplicate"])
        if payload.get("sitekey") != self.required_sitekey:
            return self._json(400, False, ["bad_request"])
        if payload.get("secret") != self.required_secret:
            return self._json(401, False, ["secret_invalid"])
        if (
            self.required_solution is not None
            and payload.get("solution") != self.required_solution
        ):
            return self._json(200, False, ["solution_invalid"])
        return self._json(200, True, [])

    @staticmethod
    def _json(status: int, success: bool, errors: list[str]) -> httpx.Response:
        return httpx.Response(status, json={"success": success, "errors": errors})


@pytest.fixture
def fake_captcha() -> FakeFriendlyCaptcha:
    return FakeFriendlyCaptcha()


# ── Mail ──────────────────────────────────────────────────────────────────────


class RecordingMailTransport:
    def __init__(
        self,
        recorder: "MailTransportRecorder",
        endpoint: SmtpEndpoint,
        credentials: Optional[MailCredentials],
        timeout: float,
    ) -> None:
        self._recorder = recorder
        self.endpoint = endpoint
        self.credentials = credentials
        self.timeout = timeout

    async def send(self, message: EmailMessage) -> None:
        if self._recorder.fail_with is not None:
            raise self._recorder.fail_with
        self._recorder.sent.append(message)


class MailTransportRecorder:
    """Transport factory for MailDispatcher that keeps every built transport."""

    def __init__(self) -> None:
        self.built: list[RecordingMailTransport] = []
        self.sent: list[EmailMessage] = []
        self.fail_with: Optional[Exception] = None

    def factory(
        self,
        endpoint: SmtpEndpoint,
        credentials: Optional[MailCredentials],
        timeout: float,
    ) -> RecordingMailTransport:
        transport = RecordingMailTransport(self, endpoint, credentials, timeout)
        self.built.append(transport)
        return transport


@pytest.fixture
def mail_recorder() -> MailTransportRecorder:
    return MailTransportRecorder()


@pytest.fixture
def plain_mail_settings() -> MailSettings:
    return MailSettings(smtp_url="smtp://localhost:2525")


@pytest.fixture
def tls_mail_settings() -> MailSettings:
    return MailSettings(smtp_url="smtps://localhost:4650")


# ── Secrets ───────────────────────────────────────────────────────────────────


@pytest.fixture
def secret_source() -> InMemorySecretSource:
    return InMemorySecretSource(
        {
            CAPTCHA_SECRET_NAME: {
                "FRIENDLYCAPTCHA_SITEKEY": FAKE_SITEKEY,
                "FRIENDLYCAPTCHA_SECRET": FAKE_SECRET,
            },
            SMTP_SECRET_NAME: {
                "SMTP_USERNAME": "fake SMTP username",
                "SMTP_PASSWORD": "fake SMTP password",
            },
        }
    )


@pytest.fixture
def submission_payload() -> dict:
    return {
        "name": "Arbitrary sender",
        "email": "email@example.com",
        "subject": "Test",
        "body": "Test message",
        "language": "en",
        "frc-captcha-solution": CORRECT_SOLUTION,
    }
