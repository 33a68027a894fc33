"""
Unit tests for ConsoleEmailSender adapter.

Tests verify the console email sender implements EmailSender protocol
and logs outbound messages in the correct format.
"""

import asyncio
import logging

import pytest

from src.adapters.smtp.console import ConsoleEmailSender
from src.domain.ports import OutboundMessage


def make_message(recipient: str = "user@example.com", code: str = "A1B2C3") -> OutboundMessage:
    return OutboundMessage(
        recipient=recipient,
        subject="Acme | Verification Code",
        body=f"Your Acme verification code is: {code}",
        sender_name="Acme Verification",
    )


class TestConsoleEmailSenderProtocol:
    """Tests for EmailSender protocol compliance."""

    def test_implements_email_sender_protocol(self) -> None:
        """ConsoleEmailSender implements EmailSender protocol."""
        from src.domain.ports import EmailSender

        sender = ConsoleEmailSender()
        assert callable(sender.send)
        assert callable(sender.verify)

        def accepts_email_sender(s: EmailSender) -> None:
            pass

        accepts_email_sender(sender)

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleEmailSender uses structural subtyping, not inheritance."""
        bases = ConsoleEmailSender.__bases__
        assert bases == (object,), f"Expected only object as base, got {bases}"


class TestSend:
    """Tests for send method."""

    def test_send_logs_message(self, caplog: pytest.LogCaptureFixture) -> None:
        """Message is logged at INFO level."""
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            asyncio.run(sender.send(make_message()))

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.INFO

    def test_send_format(self, caplog: pytest.LogCaptureFixture) -> None:
        """Log includes marker, recipient, subject and the code in the body."""
        sender = ConsoleEmailSender()

        with caplog.at_level(logging.INFO):
            asyncio.run(sender.send(make_message("user@example.com", "5678AB")))

        assert "[VERIFICATION]" in caplog.text
        assert "To: user@example.com" in caplog.text
        assert "Subject: Acme | Verification Code" in caplog.text
        assert "5678AB" in caplog.text

    def test_send_returns_none(self) -> None:
        """Method returns None (fire-and-forget)."""
        sender = ConsoleEmailSender()
        assert asyncio.run(sender.send(make_message())) is None

    def test_concurrent_sends_all_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Concurrent sends each produce one complete log entry."""
        sender = ConsoleEmailSender()

        async def send_all() -> None:
            await asyncio.gather(
                *(sender.send(make_message(f"user{i}@example.com", f"{i:06X}")) for i in range(10))
            )

        with caplog.at_level(logging.INFO):
            asyncio.run(send_all())

        assert len(caplog.records) == 10
        for record in caplog.records:
            assert "[VERIFICATION]" in record.message
            assert "To:" in record.message


class TestVerify:
    """Tests for the handshake."""

    def test_verify_always_true(self) -> None:
        assert asyncio.run(ConsoleEmailSender().verify()) is True
