"""Ingredient OCR - structured ingredient extraction from recipe images."""

__version__ = "0.1.0"

from . import ingredients, ocr, pipeline

__all__ = ["ingredients", "ocr", "pipeline"]
