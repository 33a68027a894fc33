"""
Verification domain service - one-time code issuance and redemption.

Code Lifecycle
==============

States:
- CREATED: Row persisted at issuance, redeemable
- EXPIRED: Derived at query time once now - created_at >= TTL (never stored)
- DELETED: Removed by an ExpiryReaper sweep

Transitions:
    CREATED -> EXPIRED          (TTL elapses)
    CREATED -> CREATED          (successful redemption changes nothing)
    CREATED|EXPIRED -> DELETED  (reaper sweep selects by age)

Redemption never consumes a code: the same email/code pair stays valid
until its TTL elapses. Issuing again for the same email adds a row rather
than replacing the earlier one.

Persistence happens before delivery. If the mail transport fails, the
stored code is kept and the DeliveryError propagates to the caller.
"""

import logging
from dataclasses import dataclass, field

from .codes import CodeGenerator
from .exceptions import DeliveryError, ValidationError
from .ports import (
    Clock,
    CodeStore,
    EmailSender,
    OutboundMessage,
    RedeemResult,
    SystemClock,
    VerificationCode,
    to_millis,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssueResult:
    """Outcome of a successful issuance. The code is for in-process callers only."""

    email: str
    code: str
    created_at: int
    expires_at: int


def require_fields(**fields: str | None) -> None:
    """Raise ValidationError for the first missing or empty field, in argument order."""
    for name, value in fields.items():
        if value is None or value == "":
            raise ValidationError(name)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def describe_ttl(ttl_seconds: int) -> str:
    if ttl_seconds % 60 == 0:
        minutes = ttl_seconds // 60
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    return f"{ttl_seconds} second{'s' if ttl_seconds != 1 else ''}"


@dataclass
class VerificationService:
    """
    Domain service for verification codes.

    Orchestrates issuance (validate, normalize, generate, persist, deliver)
    and redemption (validate, normalize, look up within the TTL window).
    """

    store: CodeStore
    email_sender: EmailSender
    ttl_seconds: int = 120
    generator: CodeGenerator = field(default_factory=CodeGenerator)
    clock: Clock = field(default_factory=SystemClock)

    @property
    def ttl_ms(self) -> int:
        return self.ttl_seconds * 1000

    async def issue(self, company: str | None, username: str | None, email: str | None) -> IssueResult:
        """
        Issue a new code for an identity and send it by email.

        Args:
            company: Tenant name, used in the subject line
            username: Display name, used in the greeting
            email: Recipient address (will be normalized)

        Returns:
            IssueResult with the normalized email, code and validity window

        Raises:
            ValidationError: If any field is missing or empty
            StorageError: If the code could not be persisted
            DeliveryError: If the message could not be sent (code stays valid)
        """
        require_fields(company=company, username=username, email=email)

        normalized_email = normalize_email(email)
        code = self.generator.generate()
        created_at = to_millis(self.clock.now())

        record = VerificationCode(
            company=company,
            username=username,
            email=normalized_email,
            code=code,
            created_at=created_at,
        )
        record_id = await self.store.insert(record)
        logger.info("Issued verification code id=%s for %s", record_id, normalized_email)

        message = self._build_message(record)
        try:
            await self.email_sender.send(message)
        except DeliveryError:
            logger.error(
                "Delivery failed for code id=%s to %s; code remains valid",
                record_id,
                normalized_email,
            )
            raise

        return IssueResult(
            email=normalized_email,
            code=code,
            created_at=created_at,
            expires_at=record.expires_at(self.ttl_ms),
        )

    async def redeem(self, email: str | None, code: str | None) -> RedeemResult:
        """
        Check an email/code pair against live codes.

        Does not consume the code. The TTL is evaluated here rather than
        relying on the reaper having removed old rows.

        Raises:
            ValidationError: If either field is missing or empty
            StorageError: If the lookup fails
        """
        require_fields(email=email, code=code)

        normalized_email = normalize_email(email)
        not_before = to_millis(self.clock.now()) - self.ttl_ms

        match = await self.store.find_valid(normalized_email, code.strip(), not_before)
        if match is None:
            logger.info("Rejected verification attempt for %s", normalized_email)
            return RedeemResult.INVALID
        return RedeemResult.VALID

    def _build_message(self, record: VerificationCode) -> OutboundMessage:
        body = (
            f"Hello {record.username},\n\n"
            f"Your {record.company} verification code is: {record.code}\n\n"
            f"This code expires in {describe_ttl(self.ttl_seconds)}.\n"
        )
        return OutboundMessage(
            recipient=record.email,
            subject=f"{record.company} | Verification Code",
            body=body,
            sender_name=f"{record.company} Verification",
        )
