"""
Shared error handling for the character proxy.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ProxyException(Exception):
    """Base exception for character proxy services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ExternalServiceError(ProxyException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class UpstreamStatusError(ExternalServiceError):
    """Upstream replied with a non-2xx status.

    Carries the raw reply so it can be handed back to the caller unmodified.
    """

    def __init__(
        self,
        service: str,
        status_code: int,
        body: bytes,
        content_type: Optional[str] = None,
    ):
        self.upstream_status = status_code
        self.body = body
        self.content_type = content_type
        super().__init__(
            service,
            f"Unexpected status {status_code}",
            {"status_code": status_code},
        )
