"""
Exception hierarchy for the JSX to PDF pipeline.

Every stage of the pipeline raises a subclass of JsxPdfError so the HTTP
layer can map failures onto a consistent JSON envelope:

    {"error": "<message>", "details": "<diagnostic>"}

Nothing in the core retries automatically.
"""

from typing import Any, Dict, Optional


class JsxPdfError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Short, user-facing description of the failure
        details: Optional diagnostic text (parser message, engine error, ...)
        http_status: Status code used when the error reaches the HTTP layer
    """

    http_status: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message if details is None else f"{message}: {details}")
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON error envelope."""
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(JsxPdfError):
    """
    Raised when a caller payload is missing required fields or has the
    wrong shape. Detected before any view is invoked.
    """

    http_status = 400


class CompilationError(JsxPdfError):
    """
    Raised when dynamic template source cannot be transpiled or evaluated
    into a view.

    Attributes:
        line: 1-based line of the offending source position, if known
        column: 1-based column of the offending source position, if known
    """

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.line = line
        self.column = column


class RenderError(JsxPdfError):
    """Raised when a view raises while producing or serializing its tree."""


class RenderEngineError(JsxPdfError):
    """Raised when the headless browser fails to launch, navigate or print."""


class RenderEngineTimeoutError(RenderEngineError):
    """Raised when an engine launch, navigation or print exceeds its timeout."""


class PayloadTooLargeError(JsxPdfError):
    """Raised when a request body exceeds the configured size limit."""

    http_status = 413


class LengthRequiredError(JsxPdfError):
    """Raised when a request body arrives without a Content-Length header."""

    http_status = 411
