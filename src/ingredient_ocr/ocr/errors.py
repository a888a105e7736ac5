"""Typed failures raised by the OCR layer.

Each exception carries an :class:`OcrErrorKind` so callers can pick a user
facing message from the kind rather than from the message text.
"""

import enum
from typing import Any, Dict, Optional


class OcrErrorKind(enum.Enum):
    VALIDATION = "validation"
    INITIALIZATION = "initialization"
    IMAGE_LOAD = "image_load"
    EXTRACTION = "extraction"
    TIMEOUT = "timeout"


class OcrError(Exception):
    """Base class for OCR failures."""

    kind = OcrErrorKind.EXTRACTION

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = dict(detail or {})

    @property
    def is_retryable(self) -> bool:
        """Invalid input fails the same way every time; everything else may not."""
        return self.kind is not OcrErrorKind.VALIDATION

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class ValidationError(OcrError):
    """The image path, size or format is not acceptable."""

    kind = OcrErrorKind.VALIDATION


class InitializationError(OcrError):
    """An OCR engine could not be created for a language configuration."""

    kind = OcrErrorKind.INITIALIZATION

    def __init__(
        self, message: str, languages: str, detail: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, {"languages": languages, **(detail or {})})
        self.languages = languages


class ImageLoadError(OcrError):
    """The image could not be decoded for OCR."""

    kind = OcrErrorKind.IMAGE_LOAD


class ExtractionFailure(OcrError):
    """The OCR engine failed while reading text."""

    kind = OcrErrorKind.EXTRACTION


class CircuitOpenError(ExtractionFailure):
    """The circuit breaker is open and the request was rejected without trying."""


class OcrTimeoutError(OcrError):
    """An OCR call took longer than the configured timeout."""

    kind = OcrErrorKind.TIMEOUT

    def __init__(
        self, message: str, timeout_secs: float, detail: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, {"timeout_secs": timeout_secs, **(detail or {})})
        self.timeout_secs = timeout_secs
