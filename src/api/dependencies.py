"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived collaborators (store, email sender, settings) are created
during app lifespan startup and stored in app.state.
"""

from fastapi import Request

from src.config.settings import Settings
from src.domain.codes import CodeGenerator
from src.domain.health import HealthMonitor
from src.domain.notification import NotificationService
from src.domain.ports import CodeStore, EmailSender
from src.domain.verification import VerificationService


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_store(request: Request) -> CodeStore:
    """Get the code store from app state."""
    return request.app.state.store


def get_email_sender(request: Request) -> EmailSender:
    """Get the mail transport from app state."""
    return request.app.state.email_sender


def get_verification_service(request: Request) -> VerificationService:
    """
    Create verification service with injected dependencies.

    Wires together the store, email sender and code settings for the domain service.
    """
    settings = get_app_settings(request)
    return VerificationService(
        store=get_store(request),
        email_sender=get_email_sender(request),
        ttl_seconds=settings.code_ttl_seconds,
        generator=CodeGenerator(length=settings.code_length),
    )


def get_health_monitor(request: Request) -> HealthMonitor:
    """Create health monitor with the configured retry budget."""
    settings = get_app_settings(request)
    return HealthMonitor(
        store=get_store(request),
        email_sender=get_email_sender(request),
        attempts=settings.health_smtp_attempts,
        retry_delay_seconds=settings.health_smtp_retry_delay_seconds,
    )


def get_notification_service(request: Request) -> NotificationService:
    """Create notification relay bound to the mail transport."""
    return NotificationService(email_sender=get_email_sender(request))
