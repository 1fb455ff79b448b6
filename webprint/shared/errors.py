"""
Error hierarchy for WebPrint.

Every error carries a stable code and the HTTP status it maps to. The app
registers a single exception handler that turns these into JSON responses.
"""

from typing import Any


class WebPrintError(Exception):
    """Base error for all WebPrint failures."""

    code = "internal_error"
    http_status = 500

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidInputError(WebPrintError):
    """Request is missing a render mode or carries malformed fields."""
    code = "invalid_input"
    http_status = 400


class PayloadTooLargeError(WebPrintError):
    """Inbound HTML exceeds the configured ceiling."""
    code = "payload_too_large"
    http_status = 400


class ResultTooLargeError(WebPrintError):
    """Rendered PDF exceeds the configured ceiling."""
    code = "result_too_large"
    http_status = 500


class ServiceUnavailableError(WebPrintError):
    """Rendering engine failed to initialize at startup."""
    code = "service_unavailable"
    http_status = 503


class RenderTimeoutError(WebPrintError):
    """Navigation, content load or readiness wait exceeded its budget."""
    code = "render_timeout"
    http_status = 500


class EngineFaultError(WebPrintError):
    """Browser crashed or raised an unexpected engine-level error."""
    code = "engine_fault"
    http_status = 500


class OriginNotAllowedError(WebPrintError):
    """Browser origin is not on the allow-list."""
    code = "origin_not_allowed"
    http_status = 403
