"""
SMTP email sender adapter - Implements EmailSender protocol via aiosmtplib.

Port 465 uses implicit TLS; any other port upgrades with STARTTLS. Messages
are sent as plain text: templating is not this adapter's concern.
"""

import logging
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from src.domain.exceptions import DeliveryError
from src.domain.ports import OutboundMessage

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465


class SmtpEmailSender:
    """
    Implements EmailSender protocol over SMTP.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Opens a fresh connection per message; no connection is held between sends.
    """

    def __init__(
        self,
        hostname: str,
        port: int,
        username: str = "",
        password: str = "",
        from_address: str = "",
        timeout: float = 15.0,
    ) -> None:
        self._hostname = hostname
        self._port = port
        self._username = username
        # App passwords are often pasted with spaces or quotes
        self._password = password.strip().strip('"').replace(" ", "")
        self._from_address = from_address or username
        self._timeout = timeout

    def _tls_options(self) -> dict[str, bool]:
        if self._port == IMPLICIT_TLS_PORT:
            return {"use_tls": True}
        return {"start_tls": True}

    def _credentials(self) -> dict[str, str]:
        if self._username and self._password:
            return {"username": self._username, "password": self._password}
        return {}

    def build_message(self, message: OutboundMessage) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = message.subject
        msg["From"] = (
            formataddr((message.sender_name, self._from_address))
            if message.sender_name
            else self._from_address
        )
        msg["To"] = message.recipient
        msg.set_content(message.body)
        return msg

    async def send(self, message: OutboundMessage) -> None:
        """
        Send a message through the configured SMTP server.

        Raises:
            DeliveryError: If the connection, login or send fails
        """
        try:
            await aiosmtplib.send(
                self.build_message(message),
                hostname=self._hostname,
                port=self._port,
                timeout=self._timeout,
                **self._credentials(),
                **self._tls_options(),
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.exception("SMTP send to %s failed", message.recipient)
            raise DeliveryError(f"smtp send failed: {e}") from e

    async def verify(self) -> bool:
        """Connect, authenticate and quit. True if all three succeed."""
        client = aiosmtplib.SMTP(
            hostname=self._hostname,
            port=self._port,
            timeout=self._timeout,
            **self._credentials(),
            **self._tls_options(),
        )
        try:
            async with client:
                await client.noop()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning("SMTP handshake with %s:%s failed: %s", self._hostname, self._port, e)
            return False
        return True
