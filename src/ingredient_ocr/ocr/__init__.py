"""OCR text extraction with engine pooling, retries and a circuit breaker."""

from .circuit_breaker import CircuitBreaker
from .config import FormatSizeLimits, OcrConfig, RecoveryConfig
from .engine import OcrEngine, TesseractEngine
from .errors import (
    CircuitOpenError,
    ExtractionFailure,
    ImageLoadError,
    InitializationError,
    OcrError,
    OcrErrorKind,
    OcrTimeoutError,
    ValidationError,
)
from .extraction import clean_ocr_text, extract_text_from_image
from .instance_manager import OcrInstanceManager
from .retry import calculate_retry_delay, retry_on_ocr_error
from .validation import (
    estimate_memory_usage,
    is_supported_image_format,
    validate_image_path,
    validate_image_with_format_limits,
)

__all__ = [
    "CircuitBreaker",
    "FormatSizeLimits",
    "OcrConfig",
    "RecoveryConfig",
    "OcrEngine",
    "TesseractEngine",
    "CircuitOpenError",
    "ExtractionFailure",
    "ImageLoadError",
    "InitializationError",
    "OcrError",
    "OcrErrorKind",
    "OcrTimeoutError",
    "ValidationError",
    "clean_ocr_text",
    "extract_text_from_image",
    "OcrInstanceManager",
    "calculate_retry_delay",
    "retry_on_ocr_error",
    "estimate_memory_usage",
    "is_supported_image_format",
    "validate_image_path",
    "validate_image_with_format_limits",
]
