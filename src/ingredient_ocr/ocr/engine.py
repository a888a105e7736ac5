"""OCR engine interface and the Tesseract implementation."""

import logging
import threading
from abc import ABC, abstractmethod

import pytesseract
from PIL import Image, UnidentifiedImageError

from ingredient_ocr.ocr.errors import (
    ExtractionFailure,
    ImageLoadError,
    InitializationError,
    OcrTimeoutError,
)

logger = logging.getLogger(__name__)


class OcrEngine(ABC):
    """
    Interface for OCR engines.

    Engines return the raw recognised text; cleaning and parsing happen later.
    Implementations must be safe to call from several threads.
    """

    languages: str

    @abstractmethod
    def extract_text(self, image_path: str, timeout_secs: float) -> str:
        raise NotImplementedError


class TesseractEngine(OcrEngine):
    """Tesseract OCR through ``pytesseract``.

    Construction checks that the tesseract binary runs and that every
    requested language pack is installed, so a bad configuration fails once
    when the engine is pooled rather than on every image.
    """

    def __init__(self, languages: str):
        self.languages = languages
        self._lock = threading.Lock()

        try:
            version = pytesseract.get_tesseract_version()
            installed = set(pytesseract.get_languages(config=""))
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError) as e:
            raise InitializationError(
                f"Tesseract is not available: {e}", languages=languages
            ) from e

        missing = [lang for lang in languages.split("+") if lang not in installed]
        if missing:
            raise InitializationError(
                f"Tesseract language data not installed: {', '.join(missing)}",
                languages=languages,
                detail={"missing": missing},
            )

        logger.info("Initialized Tesseract %s for languages: %s", version, languages)

    def extract_text(self, image_path: str, timeout_secs: float) -> str:
        try:
            with Image.open(image_path) as img:
                img.load()
                image = img.convert("RGB") if img.mode not in ("RGB", "L") else img.copy()
        except (OSError, UnidentifiedImageError) as e:
            raise ImageLoadError(
                f"Failed to load image for OCR: {e}", {"image_path": image_path}
            ) from e

        # A tesseract API handle is not shared between concurrent calls
        with self._lock:
            try:
                return pytesseract.image_to_string(
                    image, lang=self.languages, timeout=timeout_secs
                )
            # TesseractError subclasses RuntimeError and must be caught first
            except pytesseract.TesseractError as e:
                raise ExtractionFailure(
                    f"Failed to extract text from image: {e}",
                    {"status": e.status},
                ) from e
            except RuntimeError as e:
                if "timeout" in str(e).lower():
                    raise OcrTimeoutError(
                        f"OCR operation timed out after {timeout_secs} seconds",
                        timeout_secs=timeout_secs,
                    ) from e
                raise ExtractionFailure(
                    f"Failed to extract text from image: {e}"
                ) from e
