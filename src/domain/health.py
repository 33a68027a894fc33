"""
Dependency health monitor.

Storage is probed once: it is expected to be local and fast. The mail
transport handshake is retried a bounded number of times with a fixed
delay, because provider handshakes fail transiently over short windows.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

from .exceptions import DependencyUnhealthy
from .ports import Clock, CodeStore, EmailSender, SystemClock

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class HealthReport:
    """Aggregated health verdict."""

    status: str
    components: dict[str, str]
    timestamp: datetime

    @property
    def healthy(self) -> bool:
        return self.status == STATUS_OK

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "components": dict(self.components),
            "timestamp": self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }


@dataclass
class HealthMonitor:
    """
    Probes the code store and the mail transport on demand.

    Attributes:
        store: Code store, probed with a single ping()
        email_sender: Mail transport, probed with verify() up to ``attempts`` times
        attempts: Total transport handshakes per check (first try plus retries)
        retry_delay_seconds: Pause between failed handshakes
        sleep: Awaitable delay, replaceable in tests
    """

    store: CodeStore
    email_sender: EmailSender
    attempts: int = 4
    retry_delay_seconds: float = 1.0
    clock: Clock = field(default_factory=SystemClock)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def check(self) -> HealthReport:
        database = STATUS_OK if await self._probe_store() else STATUS_ERROR

        try:
            await self._probe_transport()
            smtp = STATUS_OK
        except DependencyUnhealthy as exc:
            logger.error("Health check: %s", exc)
            smtp = STATUS_ERROR

        components = {"database": database, "smtp": smtp}
        healthy = all(status == STATUS_OK for status in components.values())
        return HealthReport(
            status=STATUS_OK if healthy else STATUS_ERROR,
            components=components,
            timestamp=self.clock.now(),
        )

    async def _probe_store(self) -> bool:
        ok = await self.store.ping()
        if not ok:
            logger.error("Health check: database ping failed")
        return ok

    async def _probe_transport(self) -> None:
        """
        Handshake with the mail transport until one attempt succeeds.

        Raises:
            DependencyUnhealthy: If every attempt failed
        """
        for attempt in range(1, self.attempts + 1):
            try:
                if await self.email_sender.verify():
                    return
                logger.warning("SMTP handshake attempt %d/%d failed", attempt, self.attempts)
            except Exception as exc:
                logger.warning(
                    "SMTP handshake attempt %d/%d raised: %s", attempt, self.attempts, exc
                )
            if attempt < self.attempts:
                await self.sleep(self.retry_delay_seconds)
        raise DependencyUnhealthy("smtp", self.attempts)
