"""MailTransport protocol: the dispatcher depends on this, not on smtplib."""

from email.message import EmailMessage
from typing import Protocol


class MailTransport(Protocol):
    async def send(self, message: EmailMessage) -> None: ...
