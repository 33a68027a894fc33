"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Request fields are optional at the schema level: presence is checked by the
domain layer so that a missing field yields 400 with a field-specific message.
"""

from pydantic import BaseModel, Field


class RequestCodeRequest(BaseModel):
    """Request model for code issuance."""

    company: str | None = Field(None, description="Company name shown in the email")
    username: str | None = Field(None, description="Name used to greet the recipient")
    email: str | None = Field(None, description="Recipient email address")


class VerifyCodeRequest(BaseModel):
    """Request model for code redemption."""

    email: str | None = Field(None, description="Email the code was issued to")
    code: str | None = Field(None, description="Verification code from the email")


class MessageResponse(BaseModel):
    """Response model carrying a single human-readable message."""

    message: str


class VerifyCodeResponse(BaseModel):
    """Response model for code redemption, success or failure."""

    valid: bool
    message: str


class HealthResponse(BaseModel):
    """Response model for the health endpoint."""

    status: str
    components: dict[str, str]
    timestamp: str


class NotificationRequest(BaseModel):
    """Request model for a single notification email."""

    to: str | None = None
    subject: str | None = None
    body: str | None = None
    company_name: str | None = None


class NotificationResponse(BaseModel):
    """Response model for a sent notification."""

    message: str
    to: str
