"""
Domain layer - Pure business logic with zero framework imports.

This package contains the verification code lifecycle (issue, redeem,
expire), the dependency health monitor, and the port interfaces that
infrastructure adapters implement.
"""

from .codes import CodeGenerator
from .exceptions import (
    DeliveryError,
    DependencyUnhealthy,
    InvalidOrExpired,
    StorageError,
    ValidationError,
    VerificationError,
)
from .health import HealthMonitor, HealthReport
from .notification import NotificationService
from .ports import (
    Clock,
    CodeStore,
    EmailSender,
    OutboundMessage,
    RedeemResult,
    SystemClock,
    VerificationCode,
)
from .reaper import ExpiryReaper
from .verification import IssueResult, VerificationService

__all__ = [
    "Clock",
    "CodeGenerator",
    "CodeStore",
    "DeliveryError",
    "DependencyUnhealthy",
    "EmailSender",
    "ExpiryReaper",
    "HealthMonitor",
    "HealthReport",
    "InvalidOrExpired",
    "IssueResult",
    "NotificationService",
    "OutboundMessage",
    "RedeemResult",
    "StorageError",
    "SystemClock",
    "ValidationError",
    "VerificationCode",
    "VerificationError",
    "VerificationService",
]
