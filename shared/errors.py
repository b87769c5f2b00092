"""
Shared error handling for the Promotion Rule Engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import get_request_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class PromotionServiceException(Exception):
    """Base exception for promotion services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=get_request_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(PromotionServiceException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class PatternError(PromotionServiceException):
    """A condition carries a regular expression that does not compile."""

    def __init__(self, pattern: Any, message: str = "Invalid regular expression", details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details.setdefault("pattern", str(pattern))
        super().__init__("PATTERN_ERROR", message, details)


class RuleSetLoadError(PromotionServiceException):
    """Rule set could not be read or parsed."""

    def __init__(self, message: str = "Failed to load rule set", details: Optional[Dict[str, Any]] = None):
        super().__init__("RULE_SET_LOAD_ERROR", message, details)


class InternalError(PromotionServiceException):
    """Unexpected failure inside the engine."""

    def __init__(self, message: str = "Internal error", details: Optional[Dict[str, Any]] = None):
        super().__init__("INTERNAL_ERROR", message, details)
