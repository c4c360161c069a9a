"""Diff evaluator: turns a reconciled image pair into a percentage and artifacts."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image
from pixelmatch.contrib.PIL import pixelmatch

from visualify.errors import ImageDecodeError
from visualify.models.comparison import ComparisonPair, ComparisonResult

from .reconciler import ReconciledPair, reconcile_files

logger = logging.getLogger(__name__)

# Per-pixel colour distance (fraction of the maximum) tolerated as anti-aliasing noise
COLOR_THRESHOLD = 0.06
FAILED_PERCENTAGE = 100.0


def diff_percentage(diff_pixels: int, width: int, height: int) -> float:
    """Percentage of differing pixels over the reconciled area, to 2 decimals."""
    total = width * height
    if total <= 0:
        raise ImageDecodeError(f"Cannot diff an empty {width}x{height} image")
    return round(diff_pixels * 100 / total, 2)


def format_percentage(value: float) -> str:
    return f"{value:.2f}"


def run_pixel_diff(pair: ReconciledPair) -> tuple[Image.Image, int]:
    """Run the pixel-difference primitive, returning the diff image and differing pixel count."""
    width, height = pair.size
    diff_image = Image.new("RGBA", (width, height))
    try:
        count = pixelmatch(pair.image_a, pair.image_b, diff_image, threshold=COLOR_THRESHOLD)
    except Exception as e:
        raise ImageDecodeError(f"Pixel diff failed: {e}") from e
    return diff_image, count


def evaluate_pair(
    pair: ComparisonPair,
    threshold: float,
    max_width: int | None = None,
) -> ComparisonResult:
    """Reconcile, diff and persist artifacts for one pair.

    Images that differ are an expected outcome. Only unreadable inputs or a
    failing diff primitive produce an error result, scored at 100%.
    """
    data_path = Path(pair.data_path)
    try:
        reconciled = reconcile_files(pair.image_a, pair.image_b, max_width=max_width)
        diff_image, diff_pixels = run_pixel_diff(reconciled)
        width, height = reconciled.size
        percentage = diff_percentage(diff_pixels, width, height)
    except ImageDecodeError as e:
        logger.error("Error comparing %s: %s", pair.identifier, e)
        _write_data(data_path, FAILED_PERCENTAGE)
        return ComparisonResult(
            identifier=pair.identifier,
            path_key=pair.path_key,
            width_label=pair.width_label,
            diff_percentage=FAILED_PERCENTAGE,
            passed=False,
            error=str(e),
        )

    diff_path = Path(pair.diff_path)
    diff_path.parent.mkdir(parents=True, exist_ok=True)
    diff_image.save(diff_path, format="PNG")
    _write_data(data_path, percentage)
    logger.debug("Diff for %s: %s%% (%d/%d pixels)",
                 pair.identifier, format_percentage(percentage), diff_pixels, width * height)

    return ComparisonResult(
        identifier=pair.identifier,
        path_key=pair.path_key,
        width_label=pair.width_label,
        diff_percentage=percentage,
        diff_pixel_count=diff_pixels,
        total_pixels=width * height,
        width=width,
        height=height,
        passed=percentage <= threshold,
    )


def _write_data(path: Path, percentage: float) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_percentage(percentage))
