"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory store, recording email sender and a controllable clock
- A wired VerificationService built from those doubles
"""

import pytest

from src.domain.codes import CodeGenerator
from src.domain.verification import VerificationService
from tests.fakes import FakeClock, InMemoryCodeStore, RecordingEmailSender

TTL_SECONDS = 120


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryCodeStore:
    return InMemoryCodeStore()


@pytest.fixture
def sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def service(
    store: InMemoryCodeStore, sender: RecordingEmailSender, clock: FakeClock
) -> VerificationService:
    return VerificationService(
        store=store,
        email_sender=sender,
        ttl_seconds=TTL_SECONDS,
        generator=CodeGenerator(length=6),
        clock=clock,
    )
