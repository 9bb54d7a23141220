"""
Custom exception hierarchy for the PM doc automation service.
Provides structured error handling with proper HTTP status codes.
"""

from typing import Any, Optional


class DocAutomationError(Exception):
    """Base exception for all service errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


# =============================================================================
# Validation Errors (400)
# =============================================================================


class ValidationError(DocAutomationError):
    """Request validation failed."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        merged = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details=merged,
            status_code=400,
        )


# =============================================================================
# Configuration Errors (400 when the caller can supply the value, 500 otherwise)
# =============================================================================


class ConfigurationError(DocAutomationError):
    """Required credentials or settings are missing."""

    def __init__(
        self,
        message: str,
        missing: Optional[list[str]] = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"missing": missing} if missing else None,
            status_code=status_code,
        )
        self.missing = missing or []


# =============================================================================
# Not Found Errors (404)
# =============================================================================


class NotFoundError(DocAutomationError):
    """Requested resource not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        msg = message or f"{resource_type} not found"
        super().__init__(
            message=msg,
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
            status_code=404,
        )


# =============================================================================
# External Service Errors (500)
# =============================================================================


class DownstreamError(DocAutomationError):
    """Non-2xx or non-JSON answer from an external system."""

    BODY_PREVIEW_CHARS = 200

    def __init__(
        self,
        system: str,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        preview = (body or "")[: self.BODY_PREVIEW_CHARS]
        text = f"{system} error"
        if status is not None:
            text += f" (HTTP {status})"
        text += f": {message}"
        if preview:
            text += f" - {preview}"
        super().__init__(
            message=text,
            code="DOWNSTREAM_ERROR",
            details={"system": system, "status": status},
            status_code=500,
        )
        self.system = system
        self.status = status
        self.body = preview


class LlmParseError(DocAutomationError):
    """Completion text could not be parsed as a JSON object."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(
            message=message,
            code="LLM_PARSE_ERROR",
            status_code=500,
        )
        self.raw_text = raw_text
