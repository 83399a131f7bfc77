"""
Shared error handling for the JWKS Aggregator.
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


class AggregatorException(Exception):
    """Base exception for aggregator services."""

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


class ConfigurationError(AggregatorException):
    """Invalid startup configuration."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ExternalServiceError(AggregatorException):
    """External service errors."""

    status_code = 502

    def __init__(
        self,
        service: str,
        message: str = "External service error",
        details: Optional[Dict[str, Any]] = None,
        code: str = "EXTERNAL_SERVICE_ERROR",
    ):
        self.service = service
        super().__init__(code, f"{service}: {message}", details)


class FetchFailedError(ExternalServiceError):
    """Transport-level failure talking to a key-set publisher."""

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(
            source,
            f"failed to get jwks: {cause}",
            details={"source": source, "cause": type(cause).__name__},
            code="FETCH_FAILED",
        )


class DecodeFailedError(ExternalServiceError):
    """Publisher answered but the body is not a key set."""

    def __init__(self, source: str, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(
            source,
            f"failed to deserialize response: {cause}",
            details={"source": source, "cause": type(cause).__name__},
            code="DECODE_FAILED",
        )
