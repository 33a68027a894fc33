"""
Unit tests for HealthMonitor.

Tests verify:
- Single storage probe
- Bounded SMTP retry with delay between attempts only
- Aggregated status
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from src.config.settings import Settings
from src.domain.health import HealthMonitor, HealthReport
from tests.fakes import FakeClock, InMemoryCodeStore, RecordingEmailSender


def make_monitor(
    store: InMemoryCodeStore,
    sender: RecordingEmailSender,
    attempts: int = 3,
) -> tuple[HealthMonitor, AsyncMock]:
    sleep = AsyncMock()
    monitor = HealthMonitor(
        store=store,
        email_sender=sender,
        attempts=attempts,
        retry_delay_seconds=1.0,
        clock=FakeClock(),
        sleep=sleep,
    )
    return monitor, sleep


class TestAggregation:
    """Tests for the aggregated verdict."""

    def test_all_ok(self) -> None:
        monitor, sleep = make_monitor(InMemoryCodeStore(), RecordingEmailSender())

        report = asyncio.run(monitor.check())

        assert report.status == "ok"
        assert report.healthy
        assert report.components == {"database": "ok", "smtp": "ok"}
        sleep.assert_not_awaited()

    def test_database_down(self) -> None:
        store = InMemoryCodeStore()
        store.alive = False
        monitor, _ = make_monitor(store, RecordingEmailSender())

        report = asyncio.run(monitor.check())

        assert report.status == "error"
        assert report.components == {"database": "error", "smtp": "ok"}

    def test_smtp_down_on_every_attempt(self) -> None:
        """Exhausting the retry budget marks smtp as error specifically."""
        sender = RecordingEmailSender(handshakes=[False, False, False])
        monitor, _ = make_monitor(InMemoryCodeStore(), sender)

        report = asyncio.run(monitor.check())

        assert report.status == "error"
        assert report.components == {"database": "ok", "smtp": "error"}

    def test_storage_probed_once(self) -> None:
        store = Mock()
        store.ping = AsyncMock(return_value=True)
        monitor, _ = make_monitor(store, RecordingEmailSender())

        asyncio.run(monitor.check())

        store.ping.assert_awaited_once()


class TestSmtpRetry:
    """Tests for the bounded retry loop."""

    def test_first_success_short_circuits(self) -> None:
        sender = RecordingEmailSender(handshakes=[True, False, False])
        monitor, sleep = make_monitor(InMemoryCodeStore(), sender)

        report = asyncio.run(monitor.check())

        assert report.components["smtp"] == "ok"
        assert sender.verify_calls == 1
        sleep.assert_not_awaited()

    def test_recovers_within_budget(self) -> None:
        """A transient failure followed by success is healthy."""
        sender = RecordingEmailSender(handshakes=[False, False, True])
        monitor, sleep = make_monitor(InMemoryCodeStore(), sender)

        report = asyncio.run(monitor.check())

        assert report.healthy
        assert sender.verify_calls == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(1.0)

    def test_default_budget_is_first_try_plus_three_retries(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A transport that recovers on the fourth handshake is healthy by default."""
        monkeypatch.delenv("HEALTH_SMTP_ATTEMPTS", raising=False)
        sender = RecordingEmailSender(handshakes=[False, False, False, True])
        sleep = AsyncMock()
        monitor = HealthMonitor(
            store=InMemoryCodeStore(),
            email_sender=sender,
            attempts=Settings(_env_file=None).health_smtp_attempts,
            clock=FakeClock(),
            sleep=sleep,
        )

        report = asyncio.run(monitor.check())

        assert report.components["smtp"] == "ok"
        assert sender.verify_calls == 4
        assert sleep.await_count == 3

    def test_dataclass_default_matches_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("HEALTH_SMTP_ATTEMPTS", raising=False)
        monitor = HealthMonitor(store=InMemoryCodeStore(), email_sender=RecordingEmailSender())
        assert monitor.attempts == Settings(_env_file=None).health_smtp_attempts == 4

    def test_attempts_are_bounded(self) -> None:
        """Exactly ``attempts`` handshakes, with no delay after the last."""
        sender = RecordingEmailSender(handshakes=[False] * 10)
        monitor, sleep = make_monitor(InMemoryCodeStore(), sender, attempts=4)

        asyncio.run(monitor.check())

        assert sender.verify_calls == 4
        assert sleep.await_count == 3

    def test_exception_counts_as_failed_attempt(self) -> None:
        sender = Mock()
        sender.verify = AsyncMock(side_effect=[ConnectionError("refused"), True])
        monitor, _ = make_monitor(InMemoryCodeStore(), sender)

        report = asyncio.run(monitor.check())

        assert report.healthy
        assert sender.verify.await_count == 2

    def test_single_attempt_budget(self) -> None:
        sender = RecordingEmailSender(handshakes=[False, True])
        monitor, sleep = make_monitor(InMemoryCodeStore(), sender, attempts=1)

        report = asyncio.run(monitor.check())

        assert report.components["smtp"] == "error"
        assert sender.verify_calls == 1
        sleep.assert_not_awaited()


class TestHealthReport:
    """Tests for report serialization."""

    def test_to_dict(self) -> None:
        clock = FakeClock()
        report = HealthReport(
            status="ok",
            components={"database": "ok", "smtp": "ok"},
            timestamp=clock.now(),
        )

        assert report.to_dict() == {
            "status": "ok",
            "components": {"database": "ok", "smtp": "ok"},
            "timestamp": "2024-01-01T12:00:00.000Z",
        }

    def test_unhealthy_report(self) -> None:
        report = HealthReport(status="error", components={}, timestamp=FakeClock().now())
        assert not report.healthy

    def test_timestamp_has_milliseconds_and_z_suffix(self) -> None:
        moment = datetime(2024, 1, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)
        report = HealthReport(status="ok", components={}, timestamp=moment)

        assert report.to_dict()["timestamp"] == "2024-01-01T12:00:00.123Z"
