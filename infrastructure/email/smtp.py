"""SMTP implementation of MailTransport.

Endpoints are configured as URLs:

    smtps://host[:port]              implicit TLS, port 465 by default
    smtp://host[:port]               plaintext, port 25 by default
    smtp://host[:port]?tls=required  STARTTLS upgrade, port 587 by default

smtplib is blocking, so every send runs in the threadpool. Each send opens
its own SMTP session; the transport object itself only carries the endpoint
and credentials and is safe to share between requests.
"""

from __future__ import annotations

import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from starlette.concurrency import run_in_threadpool

from schemas.models.credentials import MailCredentials
from shared.logging import get_logger

log = get_logger(__name__)

_DEFAULT_PORTS = {"smtps": 465, "smtp": 25}
_STARTTLS_PORT = 587


@dataclass(frozen=True)
class SmtpEndpoint:
    host: str
    port: int
    implicit_tls: bool = False
    starttls: bool = False

    @property
    def encrypted(self) -> bool:
        return self.implicit_tls


def parse_smtp_url(url: str) -> SmtpEndpoint:
    """Parse an smtp:// or smtps:// URL.

    Raises:
        ValueError: unsupported scheme, missing host or invalid port.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ValueError(f"Unsupported SMTP URL scheme {parts.scheme!r}")
    if not parts.hostname:
        raise ValueError("SMTP URL has no host")

    starttls = False
    if scheme == "smtp":
        tls = parse_qs(parts.query).get("tls", [""])[0].lower()
        starttls = tls == "required"

    # .port raises ValueError itself for out-of-range values
    port = parts.port
    if port is None:
        port = _STARTTLS_PORT if starttls else _DEFAULT_PORTS[scheme]

    return SmtpEndpoint(
        host=parts.hostname,
        port=port,
        implicit_tls=scheme == "smtps",
        starttls=starttls,
    )


class SmtpTransport:
    def __init__(
        self,
        endpoint: SmtpEndpoint,
        credentials: Optional[MailCredentials] = None,
        timeout: float = 10.0,
    ) -> None:
        self.endpoint = endpoint
        self._credentials = credentials
        self._timeout = timeout

    @property
    def authenticated(self) -> bool:
        return self._credentials is not None

    async def send(self, message: EmailMessage) -> None:
        """Deliver *message*.

        Raises smtplib.SMTPException or OSError on connection, authentication
        or delivery failures.
        """
        await run_in_threadpool(self._send_sync, message)

    def _connect(self) -> smtplib.SMTP:
        endpoint = self.endpoint
        if endpoint.implicit_tls:
            return smtplib.SMTP_SSL(
                endpoint.host,
                endpoint.port,
                timeout=self._timeout,
                context=ssl.create_default_context(),
            )
        return smtplib.SMTP(endpoint.host, endpoint.port, timeout=self._timeout)

    def _send_sync(self, message: EmailMessage) -> None:
        with self._connect() as server:
            server.ehlo()
            if self.endpoint.starttls:
                server.starttls(context=ssl.create_default_context())
                server.ehlo()
            if self._credentials is not None:
                server.user = self._credentials.username
                server.password = self._credentials.password
                server.auth("PLAIN", server.auth_plain)
            server.send_message(message)
        log.debug(
            "smtp_message_delivered",
            host=self.endpoint.host,
            port=self.endpoint.port,
        )
