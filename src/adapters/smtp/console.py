"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outbound messages to stdout for development.
"""

import logging

from src.domain.ports import OutboundMessage

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages to stdout.
    """

    async def send(self, message: OutboundMessage) -> None:
        """
        Log the message to console (simulates email delivery).

        The full body is logged at INFO level so verification codes are
        visible in container logs.

        Args:
            message: Outbound message built by the domain layer
        """
        logger.info(
            "[VERIFICATION] To: %s Subject: %s\n%s",
            message.recipient,
            message.subject,
            message.body,
        )

    async def verify(self) -> bool:
        """Console transport is always reachable."""
        return True
