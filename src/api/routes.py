"""
API routes - Verification code, health and notification endpoints.

This module defines the HTTP endpoints:
- POST /request-code - Issue a code and email it
- POST /verify-code - Check an email/code pair
- GET /health - Database and SMTP status
- POST /api/send-notification - Relay a single plain-text email

Domain errors are mapped to status codes here. Only each error's
public_message reaches the response body; details stay in the logs.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import (
    get_health_monitor,
    get_notification_service,
    get_verification_service,
)
from src.api.models import (
    HealthResponse,
    MessageResponse,
    NotificationRequest,
    NotificationResponse,
    RequestCodeRequest,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from src.domain.exceptions import (
    DeliveryError,
    InvalidOrExpired,
    StorageError,
    ValidationError,
    VerificationError,
)
from src.domain.health import HealthMonitor
from src.domain.notification import NotificationService
from src.domain.ports import RedeemResult
from src.domain.verification import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter()

_STATUS_BY_ERROR: dict[type[VerificationError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidOrExpired: status.HTTP_400_BAD_REQUEST,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    DeliveryError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: VerificationError) -> int:
    """Map a domain error to an HTTP status code (500 for anything unmapped)."""
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: VerificationError, **extra: object) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc),
        content={**extra, "message": exc.public_message},
    )


@router.post(
    "/request-code",
    response_model=MessageResponse,
    responses={
        400: {"model": MessageResponse, "description": "Missing field"},
        500: {"model": MessageResponse, "description": "Storage or delivery failure"},
    },
    summary="Request a verification code",
    description="Generate a verification code for company, username and email, "
    "store it and send it to the email address.",
)
async def request_code(
    request_data: RequestCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse | JSONResponse:
    """
    Issue a verification code.

    - **company**: Company name used in the subject line
    - **username**: Name used in the greeting
    - **email**: Recipient address (case-insensitive)
    """
    try:
        await service.issue(request_data.company, request_data.username, request_data.email)
    except VerificationError as exc:
        return error_response(exc)
    return MessageResponse(message="Verification code sent.")


@router.post(
    "/verify-code",
    response_model=VerifyCodeResponse,
    responses={
        400: {"model": VerifyCodeResponse, "description": "Missing field, or invalid or expired code"},
        500: {"model": VerifyCodeResponse, "description": "Storage failure"},
    },
    summary="Verify a code",
    description="Check whether a code is valid for an email. Wrong, expired and "
    "unknown codes all return the same response.",
)
async def verify_code(
    request_data: VerifyCodeRequest,
    service: VerificationService = Depends(get_verification_service),
) -> VerifyCodeResponse | JSONResponse:
    """
    Redeem a verification code.

    A code stays valid until it expires; verifying it does not consume it.
    """
    try:
        result = await service.redeem(request_data.email, request_data.code)
        if result is not RedeemResult.VALID:
            raise InvalidOrExpired()
    except VerificationError as exc:
        return error_response(exc, valid=False)
    return VerifyCodeResponse(valid=True, message="Code is valid.")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={500: {"model": HealthResponse, "description": "A dependency is unhealthy"}},
    summary="Dependency health",
)
async def health_check(
    monitor: HealthMonitor = Depends(get_health_monitor),
) -> JSONResponse:
    """
    Health check endpoint with database and SMTP validation.

    Returns 200 when both dependencies respond, 500 otherwise.
    """
    report = await monitor.check()
    return JSONResponse(
        status_code=status.HTTP_200_OK if report.healthy else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=report.to_dict(),
    )


@router.post(
    "/api/send-notification",
    response_model=NotificationResponse,
    responses={
        400: {"model": MessageResponse, "description": "Missing field"},
        500: {"model": MessageResponse, "description": "Delivery failure"},
    },
    summary="Send a notification email",
)
async def send_notification(
    request_data: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse | JSONResponse:
    """Send one plain-text email to a single recipient."""
    try:
        recipient = await service.send(
            request_data.to,
            request_data.subject,
            request_data.body,
            request_data.company_name,
        )
    except ValidationError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": "Missing required fields: to, subject, body"},
        )
    except DeliveryError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Failed to send email"},
        )
    return NotificationResponse(message="Notification email sent", to=recipient)
