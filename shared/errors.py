"""
Shared error handling for the Crosswire policy provider.
"""

from typing import Dict, Any, Optional, List
from pydantic import BaseModel


class _Missing:
    """Marker for keys absent from a decoded document."""

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ProviderException(Exception):
    """Base exception for the Crosswire policy provider."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def trace_id(self) -> Optional[str]:
        return self.details.get("trace_id")

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=self.trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(ProviderException):
    """Provider configuration errors."""

    def __init__(self, message: str = "Invalid configuration", config_key: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__("CONFIGURATION_ERROR", message, details)
        self.config_key = config_key


class AuthenticationError(ProviderException):
    """Authentication-related errors."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class TransportError(ProviderException):
    """Network failures and non-success HTTP responses."""

    def __init__(self, message: str = "Transport error", status_code: Optional[int] = None,
                 trace_id: Optional[str] = None, body: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        if trace_id:
            details["trace_id"] = trace_id
        if body is not None:
            details["body"] = body
        super().__init__("TRANSPORT_ERROR", message, details)
        self.status_code = status_code
        self.body = body


class DecodeError(ProviderException):
    """Response body could not be decoded into the expected shape."""

    def __init__(self, message: str = "Decode error", field: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__("DECODE_ERROR", message, details)
        self.field = field


class TypeMismatchError(DecodeError):
    """A field is absent or holds a value of the wrong type."""

    def __init__(self, field: str, expected: str, actual: Any):
        actual_type = "missing" if actual is MISSING else type(actual).__name__
        super().__init__(
            f"{field}: expected {expected}, got {actual_type}",
            field=field,
            details={"expected": expected, "actual": actual_type}
        )
        self.expected = expected
        self.actual = actual_type


class MultipleResultsError(DecodeError):
    """A lookup returned more than one policy."""

    def __init__(self, count: int):
        super().__init__(
            f"found {count} policies. Expected 1 policy",
            field="policies",
            details={"count": count}
        )
        self.count = count


class MalformedResponseError(DecodeError):
    """A response body is valid JSON but lacks a required key."""

    def __init__(self, message: str, trace_id: Optional[str] = None, body: Any = None):
        details: Dict[str, Any] = {}
        if trace_id:
            details["trace_id"] = trace_id
        if body is not None:
            details["body"] = body
        super().__init__(message, details=details)


class ValidationError(ProviderException):
    """Validation-related errors carrying every finding."""

    def __init__(self, message: str = "Validation failed", findings: Optional[List[Dict[str, Any]]] = None):
        super().__init__("VALIDATION_ERROR", message, {"findings": findings or []})
        self.findings = findings or []
