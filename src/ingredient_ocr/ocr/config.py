"""Configuration for OCR extraction and its recovery behaviour."""

import dataclasses

MB = 1024 * 1024


@dataclasses.dataclass
class RecoveryConfig:
    """Retry, timeout and circuit breaker settings.

    Attributes:
        max_retries: Extra attempts after the first one fails.
        base_retry_delay_ms: Delay before the first retry.
        max_retry_delay_ms: Cap on the exponential backoff, before jitter.
        operation_timeout_secs: Time allowed for one OCR call.
        circuit_breaker_threshold: Consecutive failures that open the breaker.
        circuit_breaker_reset_secs: How long the breaker stays open.
    """

    max_retries: int = 3
    base_retry_delay_ms: int = 1000
    max_retry_delay_ms: int = 10000
    operation_timeout_secs: int = 30
    circuit_breaker_threshold: int = 5
    circuit_breaker_reset_secs: int = 60


@dataclasses.dataclass
class FormatSizeLimits:
    """Largest accepted file size per detected image format, in bytes."""

    png_max: int = 15 * MB
    jpeg_max: int = 10 * MB
    bmp_max: int = 5 * MB
    tiff_max: int = 20 * MB
    # Anything larger is rejected before the header is even read
    min_quick_reject: int = 50 * MB


@dataclasses.dataclass
class OcrConfig:
    """Settings for one OCR extraction.

    ``languages`` is a tesseract language string such as "eng+fra" and is also
    the key under which engines are pooled.
    """

    languages: str = "eng+fra"
    buffer_size: int = 32
    min_format_bytes: int = 8
    max_file_size: int = 10 * MB
    format_limits: FormatSizeLimits = dataclasses.field(default_factory=FormatSizeLimits)
    recovery: RecoveryConfig = dataclasses.field(default_factory=RecoveryConfig)
