#!/usr/bin/env python3
"""
Runs OCR over a directory of recipe photos and writes the parsed ingredients to CSV.
"""

import argparse
import logging
import pathlib
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple

import pandas as pd
from tqdm.auto import tqdm

from ingredient_ocr.ingredients.models import IngredientList
from ingredient_ocr.ocr import (
    CircuitBreaker,
    OcrConfig,
    OcrError,
    OcrInstanceManager,
    RecoveryConfig,
)
from ingredient_ocr.pipeline import extract_ingredients_from_image

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

IMAGE_PATTERNS = ("*.png", "*.jpg", "*.jpeg", "*.bmp", "*.tif", "*.tiff")


def find_images(input_dir: pathlib.Path, pattern: Optional[str] = None) -> List[pathlib.Path]:
    """List image files under ``input_dir``, optionally restricted to one glob."""
    patterns = [pattern] if pattern else IMAGE_PATTERNS
    images = set()
    for glob in patterns:
        images.update(p for p in input_dir.rglob(glob) if p.is_file())
    return sorted(images)


def process_images(
    images: List[pathlib.Path], config: OcrConfig, max_workers: int
) -> Tuple[Dict[pathlib.Path, IngredientList], Dict[pathlib.Path, OcrError]]:
    """OCR and parse every image in parallel, sharing one engine pool and breaker.

    Returns:
        Tuple of (parsed, failed)
        parsed: image path -> IngredientList
        failed: image path -> the OCR error that stopped it
    """
    instance_manager = OcrInstanceManager()
    circuit_breaker = CircuitBreaker(config.recovery)

    parsed = {}
    failed = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_image = {
            executor.submit(
                extract_ingredients_from_image,
                str(image),
                config,
                instance_manager,
                circuit_breaker,
            ): image
            for image in images
        }

        with tqdm(total=len(images), desc="Reading ingredient images") as pbar:
            for future in as_completed(future_to_image):
                image = future_to_image[future]
                try:
                    parsed[image] = future.result()
                except OcrError as e:
                    logger.error(f"Error processing {image}: {e}")
                    failed[image] = e
                pbar.update(1)

    return parsed, failed


def build_results_frame(parsed: Dict[pathlib.Path, IngredientList]) -> pd.DataFrame:
    """Stack the per-image ingredient frames, tagging each row with its image."""
    frames = []
    for image, ingredient_list in sorted(parsed.items()):
        df = ingredient_list.to_dataframe()
        df.insert(0, "image", str(image))
        df["list_confidence"] = ingredient_list.overall_confidence
        frames.append(df)
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def main():
    """Main function to OCR recipe images and export their ingredients."""
    parser_args = argparse.ArgumentParser(
        description="Extract ingredient lists from recipe images with Tesseract OCR"
    )
    parser_args.add_argument(
        "input_dir", type=pathlib.Path, help="Directory containing recipe images"
    )
    parser_args.add_argument(
        "--pattern",
        type=str,
        default=None,
        help="Glob for image files (default: all png, jpeg, bmp and tiff files)",
    )
    parser_args.add_argument(
        "--languages",
        type=str,
        default="eng+fra",
        help="Tesseract languages (default: eng+fra)",
    )
    parser_args.add_argument(
        "--max-retries",
        type=int,
        default=3,
        help="Retries per image after the first attempt (default: 3)",
    )
    parser_args.add_argument(
        "--breaker-threshold",
        type=int,
        default=5,
        help="Consecutive failures before OCR requests are rejected (default: 5)",
    )
    parser_args.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Seconds allowed for one OCR call (default: 30)",
    )
    parser_args.add_argument(
        "--workers",
        type=int,
        default=4,
        help="Number of images processed in parallel (default: 4)",
    )
    parser_args.add_argument(
        "--output",
        type=str,
        default="ingredients.csv",
        help="CSV file to write (default: ingredients.csv)",
    )
    args = parser_args.parse_args()

    config = OcrConfig(
        languages=args.languages,
        recovery=RecoveryConfig(
            max_retries=args.max_retries,
            operation_timeout_secs=args.timeout,
            circuit_breaker_threshold=args.breaker_threshold,
        ),
    )

    images = find_images(args.input_dir, args.pattern)
    if not images:
        logger.error(f"No images found in {args.input_dir}")
        exit(1)
    logger.info(f"Found {len(images)} images in {args.input_dir}")

    try:
        parsed, failed = process_images(images, config, args.workers)
    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user")
        exit(130)

    results = build_results_frame(parsed)
    results.to_csv(args.output, index=False)
    logger.info(f"Wrote {len(results)} ingredients to {args.output}")

    print(f"\nSummary:")
    print(f"  Images processed: {len(parsed)}/{len(images)}")
    print(f"  Images failed: {len(failed)}")
    for image, error in sorted(failed.items()):
        print(f"    {image}: {error.kind.value}")
    if not results.empty:
        print(f"  Ingredients parsed: {len(results)}")
        print(f"  Mean confidence: {results['confidence'].mean() * 100:.1f}%")
        print(
            f"  Rows with a numeric amount: {results['estimated_value'].notna().sum()}"
        )


if __name__ == "__main__":
    main()
