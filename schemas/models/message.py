"""
Outbound email message.

OutboundMessage is built fresh for every submission and rendered into a
stdlib EmailMessage right before it is handed to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from email.headerregistry import Address
from email.message import EmailMessage
from typing import Optional

from pydantic import validate_email
from pydantic_core import PydanticCustomError


def parse_mailbox(email: str, display_name: Optional[str] = None) -> Address:
    """Parse *email* (plus optional display name) into a mailbox.

    Raises:
        ValueError: the address is not a valid addr-spec, or the display name
            would break the header.
    """
    if display_name and any(c in display_name for c in "\r\n"):
        raise ValueError("display name contains a line break")
    try:
        _, address = validate_email(email)
    except PydanticCustomError as e:
        raise ValueError(str(e)) from e
    return Address(display_name=display_name or "", addr_spec=address)


@dataclass(frozen=True)
class OutboundMessage:
    sender: str
    reply_to: Address
    recipient: str
    subject: str
    body: str

    def to_email(self) -> EmailMessage:
        """Render as a text/plain UTF-8 message.

        Raises ValueError when a header cannot be encoded, e.g. a subject
        containing a line break.
        """
        message = EmailMessage()
        message["From"] = self.sender
        message["Reply-To"] = self.reply_to
        message["To"] = self.recipient
        message["Subject"] = self.subject
        message.set_content(self.body)
        return message
