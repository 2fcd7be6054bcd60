"""Outbound mail dispatch through a lazily built, shared SMTP transport.

The transport is built on first use and reused for every later message. SMTP
credentials are fetched from the secret store only when the endpoint URL uses
the smtps:// scheme; credentials are never attached to an unencrypted
connection. If an unencrypted endpoint is configured where the server expects
authentication, the server rejects the message and the failure surfaces as a
DispatchError.

A failed build (bad URL, secret store outage) is not cached: the next message
retries from scratch.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Callable, Optional

from config import MailSettings
from errors import DispatchError, SecretError
from infrastructure.email.protocol import MailTransport
from infrastructure.email.smtp import SmtpEndpoint, SmtpTransport, parse_smtp_url
from infrastructure.secrets.protocol import SecretSource, get_typed_secret
from schemas.models.credentials import MailCredentials
from shared.logging import get_logger
from shared.memo import AsyncOnceCell

log = get_logger(__name__)

TransportFactory = Callable[
    [SmtpEndpoint, Optional[MailCredentials], float], MailTransport
]


class MailDispatcher:
    def __init__(
        self,
        secret_source: SecretSource,
        settings: Optional[MailSettings] = None,
        transport_factory: TransportFactory = SmtpTransport,
    ) -> None:
        self._secrets = secret_source
        self._settings = settings or MailSettings()
        self._transport_factory = transport_factory
        self._transport: AsyncOnceCell[MailTransport] = AsyncOnceCell()

    @property
    def transport_ready(self) -> bool:
        return self._transport.initialized

    async def send(self, message: EmailMessage) -> None:
        try:
            transport = await self._transport.get_or_init(self._build_transport)
        except (SecretError, ValueError) as e:
            raise DispatchError(f"Unable to connect to SMTP server: {e}") from e

        try:
            await transport.send(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(f"Error sending message: {e}") from e

    async def _build_transport(self) -> MailTransport:
        endpoint = parse_smtp_url(self._settings.smtp_url)
        log.info(
            "mail_transport_initialising",
            host=endpoint.host,
            port=endpoint.port,
            encrypted=endpoint.encrypted,
        )

        credentials = None
        if endpoint.encrypted:
            credentials = await get_typed_secret(
                self._secrets, self._settings.smtp_credentials_name, MailCredentials
            )

        return self._transport_factory(
            endpoint, credentials, self._settings.smtp_timeout_seconds
        )
