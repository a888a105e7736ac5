"""Exponential backoff for retrying failed OCR calls."""

import logging
import random
import time
from functools import wraps
from typing import Any, Callable

from ingredient_ocr.ocr.config import RecoveryConfig
from ingredient_ocr.ocr.errors import OcrError

logger = logging.getLogger(__name__)


def calculate_retry_delay(attempt: int, recovery: RecoveryConfig) -> int:
    """Milliseconds to wait before retry number ``attempt`` (1-based).

    The delay doubles from ``base_retry_delay_ms`` on every attempt up to
    ``max_retry_delay_ms``, then up to a quarter of it is added as jitter.

    Examples:
        >>> recovery = RecoveryConfig(base_retry_delay_ms=1000, max_retry_delay_ms=10000)
        >>> 1000 <= calculate_retry_delay(1, recovery) <= 1250
        True
        >>> 10000 <= calculate_retry_delay(10, recovery) <= 12500
        True
    """
    exponent = max(attempt - 1, 0)
    delay = min(recovery.base_retry_delay_ms * 2**exponent, recovery.max_retry_delay_ms)
    delay = int(delay)
    jitter = random.randint(0, delay // 4) if delay >= 4 else 0
    return delay + jitter


def retry_on_ocr_error(
    recovery: RecoveryConfig, sleep: Callable[[float], None] = time.sleep
) -> Callable:
    """Decorator that retries a function on retryable OCR errors with exponential backoff.

    The function is called at most ``recovery.max_retries + 1`` times. Errors
    that are not retryable (validation failures) are raised immediately.

    Args:
        recovery: Retry count and delay settings.
        sleep: Called with the delay in seconds between attempts.

    Returns:
        Decorated function that retries on OCR errors

    Example:
        @retry_on_ocr_error(RecoveryConfig(max_retries=2))
        def read_label(path):
            return engine.extract_text(path, timeout_secs=30)
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            max_attempts = recovery.max_retries + 1

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except OcrError as e:
                    if not e.is_retryable:
                        raise
                    if attempt >= max_attempts:
                        logger.error("OCR failed after %d attempts: %s", max_attempts, e)
                        raise
                    delay_ms = calculate_retry_delay(attempt, recovery)
                    logger.warning(
                        "OCR attempt %d/%d failed: %s. Retrying in %dms...",
                        attempt,
                        max_attempts,
                        e,
                        delay_ms,
                    )
                    sleep(delay_ms / 1000)
            return None

        return wrapper

    return decorator
