"""Resilient text extraction: breaker gate, validation, retries, clean-up."""

import logging
import time
from typing import Callable

from ingredient_ocr.ocr.circuit_breaker import CircuitBreaker
from ingredient_ocr.ocr.config import OcrConfig
from ingredient_ocr.ocr.errors import CircuitOpenError, OcrError
from ingredient_ocr.ocr.instance_manager import OcrInstanceManager
from ingredient_ocr.ocr.retry import retry_on_ocr_error
from ingredient_ocr.ocr.validation import validate_image_with_format_limits

logger = logging.getLogger(__name__)


def clean_ocr_text(text: str) -> str:
    """Trim every line and drop the blank ones.

    Examples:
        >>> clean_ocr_text("  2 cups flour \\n\\n   1 egg\\n")
        '2 cups flour\\n1 egg'
    """
    return "\n".join(line.strip() for line in text.strip().splitlines() if line.strip())


def _perform_ocr_extraction(
    image_path: str, config: OcrConfig, instance_manager: OcrInstanceManager
) -> str:
    start = time.perf_counter()
    engine = instance_manager.get_instance(config)
    try:
        raw_text = engine.extract_text(
            image_path, timeout_secs=config.recovery.operation_timeout_secs
        )
    except OcrError as e:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.warning("OCR processing failed after %.0fms: %s", elapsed_ms, e)
        raise

    text = clean_ocr_text(raw_text)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "OCR processing completed in %.0fms, extracted %d characters",
        elapsed_ms,
        len(text),
    )
    return text


def extract_text_from_image(
    image_path: str,
    config: OcrConfig,
    instance_manager: OcrInstanceManager,
    circuit_breaker: CircuitBreaker,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Extract cleaned text from an image with retries and circuit breaker protection.

    The breaker is consulted first and the image validated before any OCR
    work. Extraction is then attempted up to ``config.recovery.max_retries + 1``
    times with exponential backoff between attempts. Once the engine has been
    tried, exactly one of ``record_success``/``record_failure`` is called on
    the breaker for the whole call.

    Args:
        image_path: Image file to read.
        config: Languages, limits and recovery settings.
        instance_manager: Shared pool of OCR engines.
        circuit_breaker: Shared breaker for the OCR service.
        sleep: Called with the backoff delay in seconds between attempts.

    Returns:
        The recognised text, one non-empty trimmed line per line.

    Raises:
        CircuitOpenError: If the breaker is open.
        ValidationError: If the image is missing, too large or unreadable.
        OcrError: The last failure once every attempt has failed.
    """
    start = time.perf_counter()

    if circuit_breaker.is_open():
        logger.warning(
            "Circuit breaker is open, rejecting OCR request for image: %s", image_path
        )
        raise CircuitOpenError(
            "OCR service is temporarily unavailable due to repeated failures",
            {"image_path": image_path},
        )

    validate_image_with_format_limits(image_path, config)
    logger.info("Starting OCR text extraction from image: %s", image_path)

    extract = retry_on_ocr_error(config.recovery, sleep=sleep)(_perform_ocr_extraction)
    try:
        text = extract(image_path, config, instance_manager)
    except OcrError:
        circuit_breaker.record_failure()
        raise

    circuit_breaker.record_success()
    total_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "OCR extraction completed in %.0fms. Extracted %d characters of text",
        total_ms,
        len(text),
    )
    return text
