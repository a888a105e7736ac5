import pytest
from PIL import Image

from ingredient_ocr.ocr import validation
from ingredient_ocr.ocr.config import MB, FormatSizeLimits, OcrConfig
from ingredient_ocr.ocr.errors import ValidationError
from ingredient_ocr.ocr.validation import (
    detect_image_format,
    estimate_memory_usage,
    is_supported_image_format,
    validate_image_path,
    validate_image_with_format_limits,
)


def _write_image(path, image_format):
    Image.new("RGB", (40, 20), "white").save(path, format=image_format)
    return str(path)


@pytest.fixture
def png_path(tmp_path):
    return _write_image(tmp_path / "recipe.png", "PNG")


@pytest.fixture
def config():
    return OcrConfig()


@pytest.mark.parametrize(
    "filename, image_format",
    [
        ("recipe.png", "PNG"),
        ("recipe.jpg", "JPEG"),
        ("recipe.bmp", "BMP"),
        ("recipe.tiff", "TIFF"),
    ],
)
def test_supported_formats(tmp_path, config, filename, image_format):
    path = _write_image(tmp_path / filename, image_format)
    assert detect_image_format(path, config) == image_format
    assert validate_image_with_format_limits(path, config) == image_format
    assert is_supported_image_format(path, config)


def test_gif_is_valid_but_unsupported(tmp_path, config):
    path = _write_image(tmp_path / "recipe.gif", "GIF")
    assert validate_image_with_format_limits(path, config) == "GIF"
    assert not is_supported_image_format(path, config)


def test_unrecognised_header_uses_general_limit(tmp_path, config):
    path = tmp_path / "notes.png"
    path.write_text("2 cups flour\n" * 10)
    assert detect_image_format(str(path), config) is None
    assert validate_image_with_format_limits(str(path), config) == "unknown"
    assert not is_supported_image_format(str(path), config)


def test_too_few_header_bytes(tmp_path, config):
    path = tmp_path / "tiny.png"
    path.write_bytes(b"\x89PNG")
    assert detect_image_format(str(path), config) is None
    assert validate_image_with_format_limits(str(path), config) == "unknown"


def test_empty_path(config):
    with pytest.raises(ValidationError, match="cannot be empty"):
        validate_image_path("", config)


def test_missing_file(tmp_path, config):
    with pytest.raises(ValidationError, match="does not exist"):
        validate_image_path(str(tmp_path / "missing.png"), config)


def test_directory_is_rejected(tmp_path, config):
    with pytest.raises(ValidationError, match="not a file"):
        validate_image_path(str(tmp_path), config)


def test_empty_file(tmp_path, config):
    path = tmp_path / "empty.png"
    path.write_bytes(b"")
    with pytest.raises(ValidationError, match="empty"):
        validate_image_path(str(path), config)


def test_general_size_limit(png_path):
    config = OcrConfig(max_file_size=10)
    with pytest.raises(ValidationError, match="too large") as exc_info:
        validate_image_path(png_path, config)
    assert exc_info.value.detail["limit"] == 10
    assert not exc_info.value.is_retryable


def test_quick_reject(png_path):
    config = OcrConfig(format_limits=FormatSizeLimits(min_quick_reject=10))
    with pytest.raises(ValidationError, match="quick reject"):
        validate_image_with_format_limits(png_path, config)


def test_format_specific_limit(png_path):
    config = OcrConfig(format_limits=FormatSizeLimits(png_max=10))
    with pytest.raises(ValidationError, match="PNG format"):
        validate_image_with_format_limits(png_path, config)


def test_memory_estimate_limit(png_path, config, monkeypatch):
    monkeypatch.setattr(validation, "MAX_MEMORY_MB", 0.0)
    with pytest.raises(ValidationError, match="memory"):
        validate_image_with_format_limits(png_path, config)


@pytest.mark.parametrize(
    "file_size, image_format, expected",
    [
        (MB, "PNG", 3.0),
        (2 * MB, "JPEG", 5.0),
        (10 * MB, "BMP", 12.0),
        (MB, "TIFF", 4.0),
        (MB, "GIF", 3.0),
        (MB, None, 3.0),
    ],
)
def test_estimate_memory_usage(file_size, image_format, expected):
    assert estimate_memory_usage(file_size, image_format) == pytest.approx(expected)
