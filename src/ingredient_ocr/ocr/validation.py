"""Checks run on an image file before it is handed to the OCR engine."""

import logging
import os
from typing import Optional

from PIL import Image, UnidentifiedImageError

from ingredient_ocr.ocr.config import MB, OcrConfig
from ingredient_ocr.ocr.errors import ValidationError

logger = logging.getLogger(__name__)

# --- Constants ---

SUPPORTED_FORMATS = ("PNG", "JPEG", "BMP", "TIFF")
SUPPORTED_EXTENSIONS = ("png", "jpg", "jpeg", "bmp", "tiff", "tif")

# Decoded size relative to file size, per format
MEMORY_FACTORS = {"PNG": 3.0, "JPEG": 2.5, "BMP": 1.2, "TIFF": 4.0}
DEFAULT_MEMORY_FACTOR = 3.0
MAX_MEMORY_MB = 100.0


# --- Functions ---


def validate_image_path(image_path: str, config: OcrConfig) -> None:
    """Check that ``image_path`` names a non-empty file within the general size limit.

    Raises:
        ValidationError: If any check fails.
    """
    if not image_path:
        raise ValidationError("Image path cannot be empty")
    if not os.path.exists(image_path):
        raise ValidationError(
            f"Image file does not exist: {image_path}", {"image_path": image_path}
        )
    if not os.path.isfile(image_path):
        raise ValidationError(
            f"Path is not a file: {image_path}", {"image_path": image_path}
        )

    try:
        file_size = os.path.getsize(image_path)
    except OSError as e:
        raise ValidationError(
            f"Cannot read file metadata: {image_path} - {e}", {"image_path": image_path}
        ) from e

    if file_size > config.max_file_size:
        raise ValidationError(
            f"Image file too large: {file_size} bytes "
            f"(maximum allowed: {config.max_file_size} bytes)",
            {"file_size": file_size, "limit": config.max_file_size},
        )
    if file_size == 0:
        raise ValidationError(
            f"Image file is empty: {image_path}", {"image_path": image_path}
        )

    extension = os.path.splitext(image_path)[1].lstrip(".").lower()
    if extension and extension not in SUPPORTED_EXTENSIONS:
        logger.info("File extension '%s' may not be supported for OCR", extension)


def detect_image_format(image_path: str, config: OcrConfig) -> Optional[str]:
    """Identify the image format from the file header.

    Returns:
        Pillow's format name ("PNG", "JPEG", ...), or None when fewer than
        ``config.min_format_bytes`` bytes could be read or the header is not
        recognised.
    """
    try:
        with open(image_path, "rb") as f:
            header = f.read(config.buffer_size)
    except OSError as e:
        raise ValidationError(
            f"Cannot open image file for validation: {image_path} - {e}",
            {"image_path": image_path},
        ) from e

    if len(header) < config.min_format_bytes:
        logger.info(
            "Could not read enough bytes for format detection from %s "
            "(read %d bytes, need at least %d)",
            image_path,
            len(header),
            config.min_format_bytes,
        )
        return None

    try:
        with Image.open(image_path) as img:
            return img.format
    except (UnidentifiedImageError, OSError) as e:
        logger.info("Could not determine image format for %s: %s", image_path, e)
        return None


def estimate_memory_usage(file_size: int, image_format: Optional[str]) -> float:
    """Estimate the memory in MB needed to decode and OCR an image.

    Examples:
        >>> estimate_memory_usage(1024 * 1024, "PNG")
        3.0
        >>> estimate_memory_usage(2 * 1024 * 1024, "JPEG")
        5.0
    """
    factor = MEMORY_FACTORS.get(image_format or "", DEFAULT_MEMORY_FACTOR)
    return file_size / MB * factor


def _format_limit(image_format: str, config: OcrConfig) -> int:
    limits = config.format_limits
    return {
        "PNG": limits.png_max,
        "JPEG": limits.jpeg_max,
        "BMP": limits.bmp_max,
        "TIFF": limits.tiff_max,
    }.get(image_format, config.max_file_size)


def validate_image_with_format_limits(image_path: str, config: OcrConfig) -> str:
    """Run :func:`validate_image_path`, then apply format-specific limits.

    Files above the quick-reject threshold are refused without reading them.
    When the format is recognised its own size limit applies and the decoded
    memory estimate must stay under 100 MB; otherwise the general limit applies.

    Returns:
        The detected format name, or "unknown".

    Raises:
        ValidationError: If the image should not be processed.
    """
    validate_image_path(image_path, config)
    file_size = os.path.getsize(image_path)

    quick_reject = config.format_limits.min_quick_reject
    if file_size > quick_reject:
        logger.info(
            "Quick rejecting file %s: %d bytes exceeds quick reject threshold",
            image_path,
            file_size,
        )
        raise ValidationError(
            f"File too large for processing: {file_size} bytes "
            f"(exceeds quick reject threshold of {quick_reject} bytes)",
            {"file_size": file_size, "limit": quick_reject},
        )

    image_format = detect_image_format(image_path, config)
    if image_format is None:
        if file_size > config.max_file_size:
            raise ValidationError(
                f"Image file too large: {file_size} bytes "
                f"(maximum allowed: {config.max_file_size} bytes)",
                {"file_size": file_size, "limit": config.max_file_size},
            )
        return "unknown"

    limit = _format_limit(image_format, config)
    logger.info(
        "Detected %s format for %s, applying %dMB limit",
        image_format,
        image_path,
        limit // MB,
    )
    if file_size > limit:
        raise ValidationError(
            f"Image file too large for {image_format} format: {file_size} bytes "
            f"(maximum allowed: {limit} bytes)",
            {"format": image_format, "file_size": file_size, "limit": limit},
        )

    estimated_mb = estimate_memory_usage(file_size, image_format)
    logger.info("Estimated memory usage for %s: %.1fMB", image_path, estimated_mb)
    if estimated_mb > MAX_MEMORY_MB:
        raise ValidationError(
            f"Estimated memory usage too high: {estimated_mb:.1f}MB "
            f"(maximum allowed: {MAX_MEMORY_MB:.0f}MB)",
            {"estimated_mb": estimated_mb},
        )

    return image_format


def is_supported_image_format(image_path: str, config: OcrConfig) -> bool:
    """True if the image passes validation and is PNG, JPEG, BMP or TIFF."""
    try:
        image_format = validate_image_with_format_limits(image_path, config)
    except ValidationError as e:
        logger.info("Image %s failed validation: %s", image_path, e)
        return False

    supported = image_format in SUPPORTED_FORMATS
    logger.info(
        "Detected %s image format: %s for file: %s",
        "supported" if supported else "unsupported",
        image_format,
        image_path,
    )
    return supported
