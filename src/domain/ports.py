"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the plain data types that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol


@dataclass(frozen=True)
class VerificationCode:
    """
    One issued verification code.

    Records are never mutated after insert. Expiry is not stored: a record
    is live while ``now - created_at < ttl``, evaluated at query time.

    Attributes:
        company: Tenant identifier, stored as given
        username: Display name, stored as given
        email: Normalized (lowercase) redemption key
        code: Uppercase hexadecimal token
        created_at: Issuance time in milliseconds since the epoch
        id: Assigned by the store on insert, None before that
    """

    company: str
    username: str
    email: str
    code: str
    created_at: int
    id: int | None = None

    def expires_at(self, ttl_ms: int) -> int:
        return self.created_at + ttl_ms


class RedeemResult(Enum):
    """
    Result of a redemption attempt.

    Wrong code, expired code and never-issued code all map to INVALID.
    """

    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class OutboundMessage:
    """Plain-data message handed to the mail transport."""

    recipient: str
    subject: str
    body: str
    sender_name: str | None = None


class CodeStore(Protocol):
    """Port interface for verification code persistence."""

    async def insert(self, record: VerificationCode) -> int:
        """
        Append a new record.

        Returns:
            The id assigned to the record

        Raises:
            StorageError: If the write fails
        """
        ...

    async def find_valid(
        self, email: str, code: str, not_before: int
    ) -> VerificationCode | None:
        """
        Find a record matching email and code created after not_before.

        If several records match, any one of them may be returned.

        Raises:
            StorageError: If the read fails
        """
        ...

    async def purge_older_than(self, cutoff: int) -> int:
        """
        Delete every record with created_at < cutoff.

        Best-effort: failures are logged by the adapter and reported as 0.

        Returns:
            Number of deleted records
        """
        ...

    async def count(self, email: str) -> int:
        """Count stored records for an email, expired or not."""
        ...

    async def ping(self) -> bool:
        """Lightweight liveness probe. Never raises."""
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    async def send(self, message: OutboundMessage) -> None:
        """
        Deliver a message.

        Raises:
            DeliveryError: If the transport rejects or fails to send it
        """
        ...

    async def verify(self) -> bool:
        """Handshake with the transport. True if it is reachable and accepts our credentials."""
        ...


class Clock(Protocol):
    """Source of the current time, replaceable in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def to_millis(moment: datetime) -> int:
    """Convert an aware datetime to milliseconds since the epoch."""
    return int(moment.timestamp() * 1000)
