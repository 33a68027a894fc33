"""
Single notification relay.

Sends one caller-supplied plain-text message through the same mail
transport used for verification codes. Not a broadcast facility.
"""

import logging
from dataclasses import dataclass

from .ports import EmailSender, OutboundMessage
from .verification import require_fields

logger = logging.getLogger(__name__)

DEFAULT_SENDER_NAME = "Notifier"


@dataclass
class NotificationService:
    """Relays a single notification email."""

    email_sender: EmailSender

    async def send(
        self,
        to: str | None,
        subject: str | None,
        body: str | None,
        company_name: str | None = None,
    ) -> str:
        """
        Send one notification.

        Returns:
            The recipient address as given (stripped)

        Raises:
            ValidationError: If to, subject or body is missing or empty
            DeliveryError: If the transport fails
        """
        require_fields(to=to, subject=subject, body=body)

        recipient = to.strip()
        sender_name = (company_name or "").strip() or DEFAULT_SENDER_NAME
        await self.email_sender.send(
            OutboundMessage(
                recipient=recipient,
                subject=subject,
                body=body,
                sender_name=sender_name,
            )
        )
        logger.info("Notification sent to %s", recipient)
        return recipient
