"""
Application error types.

Every error raised on purpose by the service derives from AppError, which
carries the HTTP status the API layer should answer with and an optional
details dictionary for debugging.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base exception for expected service failures.

    Attributes:
        message: Human readable description.
        status_code: HTTP status code the API layer responds with.
        is_operational: False for programming errors that should be logged loudly.
        details: Extra context (never shown to clients outside debug mode).
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_operational: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.is_operational = is_operational
        self.details = details or {}
        super().__init__(message)

    def to_dict(self, include_details: bool = False) -> Dict[str, Any]:
        """Error body returned by the API."""
        body: Dict[str, Any] = {
            "status": "error",
            "status_code": self.status_code,
            "message": self.message,
        }
        if include_details and self.details:
            body["details"] = self.details
        return body

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Malformed input. Surfaced to the caller verbatim and never retried."""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        error_details = dict(details or {})
        if field:
            error_details["field"] = field
        super().__init__(message, details=error_details)


class StoryboardGenerationError(ValidationError):
    """The LLM produced no usable storyboard for the submitted idea."""

    status_code = 422


class ServiceUnavailable(AppError):
    """
    An external collaborator (LLM, TTS, storage) failed for reasons unrelated
    to generated content.
    """

    status_code = 502

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.service = service
        error_details = dict(details or {})
        error_details["service"] = service
        super().__init__(message, details=error_details)


class OrchestrationError(AppError):
    """Aggregating scene results failed. Carries the original cause."""

    status_code = 500

    def __init__(self, message: str, project_id: str, cause: Optional[BaseException] = None):
        details: Dict[str, Any] = {"project_id": project_id}
        if cause is not None:
            details["original_error"] = str(cause)
        super().__init__(message, is_operational=False, details=details)
