"""
Shared error handling for the declarative mock service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class MockServiceException(Exception):
    """Base exception for mock service errors."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(MockServiceException):
    """Rule document could not be read, validated or parsed."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class MalformedBodyError(MockServiceException):
    """Request body could not be parsed for a body-query evaluation."""

    def __init__(self, message: str = "Malformed request body", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_BODY", message, details)


class ResourceUnavailableError(MockServiceException):
    """Backing content of a response resource could not be read."""

    def __init__(self, location: str, message: str = "Resource unavailable", details: Optional[Dict[str, Any]] = None):
        self.location = location
        super().__init__("RESOURCE_UNAVAILABLE", f"{message}: {location}", details)


class InvalidExpressionError(MockServiceException):
    """Body-query expression failed to evaluate."""

    def __init__(self, expression: str, message: str = "Expression evaluation failed", details: Optional[Dict[str, Any]] = None):
        self.expression = expression
        super().__init__("INVALID_EXPRESSION", f"{message}: {expression}", details)
