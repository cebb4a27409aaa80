"""
Composition pipeline exceptions for SlideFlix.

Every failure of a composition request is raised as one of these classes.
Each carries a stable ``kind`` so callers (the HTTP layer, retry policies)
can branch on the failure category without string matching.
"""

from typing import Any, Dict, Optional


class CompositionError(Exception):
    """Base class for composition failures."""

    kind = "composition_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Structured failure payload."""
        return {
            "errorType": self.kind,
            "error": self.message,
            "details": self.details,
        }


class ValidationError(CompositionError):
    """Malformed or inconsistent request. Never retried."""

    kind = "validation_error"


class ResourceError(CompositionError):
    """Workspace or filesystem failure."""

    kind = "resource_error"


class DownloadError(CompositionError):
    """Raised when a slide could not be retrieved"""

    kind = "download_error"

    def __init__(self, message: str, url: str = None, status_code: int = None, details: Optional[Dict[str, Any]] = None):
        self.url = url
        self.status_code = status_code
        merged = dict(details or {})
        if url:
            merged.setdefault("url", url)
        if status_code is not None:
            merged.setdefault("status_code", status_code)
        super().__init__(message, merged)


class EncodeError(CompositionError):
    """
    Encoder failed: non-zero exit, spawn failure, or zero exit without a
    usable output file.
    """

    kind = "encode_error"

    def __init__(self, message: str, diagnostics: str = "", outcome=None, details: Optional[Dict[str, Any]] = None):
        self.diagnostics = diagnostics
        self.outcome = outcome
        merged = dict(details or {})
        if diagnostics:
            merged.setdefault("diagnostics", diagnostics)
        if outcome is not None:
            merged.setdefault("state", outcome.state.value)
            merged.setdefault("returncode", outcome.returncode)
        super().__init__(message, merged)


class EncodeTimeoutError(CompositionError):
    """
    Encoder exceeded its wall-clock limit and was killed.

    Kept apart from EncodeError so callers can apply a different retry
    policy to timeouts.
    """

    kind = "timed_out"

    def __init__(self, message: str, timeout: float = None, diagnostics: str = "", outcome=None):
        self.timeout = timeout
        self.diagnostics = diagnostics
        self.outcome = outcome
        details: Dict[str, Any] = {"timeout_seconds": timeout}
        if diagnostics:
            details["diagnostics"] = diagnostics
        super().__init__(message, details)


class PublishError(CompositionError):
    """Raised when the publisher could not store the finished artifact"""

    kind = "publish_error"
