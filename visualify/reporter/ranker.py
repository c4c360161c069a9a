"""Gallery ranker: builds gallery entries and orders them by severity."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from visualify.compare.aggregator import (
    data_filename,
    diff_filename,
    find_matching_files,
    screenshot_filename,
)
from visualify.compare.diff_evaluator import format_percentage
from visualify.errors import SetupError
from visualify.models.comparison import ComparisonSummary
from visualify.models.config import VisualifyConfig
from visualify.models.gallery import NOT_DETECTED, GalleryEntry, GalleryWidth
from visualify.url_utils import join_url

logger = logging.getLogger(__name__)


def parse_diff(diff: str) -> float | None:
    try:
        return float(diff)
    except (TypeError, ValueError):
        return None


def read_diff(data_path: Path) -> str:
    """Percentage text from a data file, or "Not detected" when missing or empty."""
    if not data_path.exists():
        return NOT_DETECTED
    text = data_path.read_text().strip()
    return text or NOT_DETECTED


def lookup_diff(summary: ComparisonSummary | None, identifier: str, data_path: Path) -> str:
    """Prefer the summary's percentage; fall back to the per-pair data file."""
    if summary is not None:
        result = summary.result_for(identifier)
        if result is not None:
            return format_percentage(result.diff_percentage)
    return read_diff(data_path)


def exceeds_threshold(diff: str, threshold: float) -> bool:
    value = parse_diff(diff)
    return value is not None and value > threshold


def max_diff(widths: list[GalleryWidth]) -> float:
    values = [parse_diff(w.diff) for w in widths]
    return max((v for v in values if v is not None), default=0.0)


def rank_entries(entries: list[GalleryEntry]) -> list[GalleryEntry]:
    """Largest regression first; ties keep discovery order."""
    return sorted(entries, key=lambda e: e.max_diff, reverse=True)


def build_config_entries(
    config: VisualifyConfig,
    summary: ComparisonSummary | None = None,
) -> list[GalleryEntry]:
    """One entry per configured path, with a width row per screen width."""
    labels = config.domain_labels
    if len(labels) < 2:
        raise SetupError(f"Gallery needs two domains, {len(labels)} configured")
    first, second = labels[:2]
    directory = Path(config.directory)
    browser = config.browser
    entries = []

    for path_key, suffix in config.paths.items():
        widths = []
        for width in config.screen_widths:
            label = str(width)
            diff = lookup_diff(summary, f"{path_key}/{label}", directory / path_key / data_filename(label, browser))
            threshold = exceeds_threshold(diff, config.threshold)
            if threshold:
                logger.warning("%s failed at a resolution of %s (%s%% diff)", path_key, label, diff)
            widths.append(GalleryWidth(
                width=label,
                diff=diff,
                threshold=threshold,
                img1_url=f"{path_key}/{screenshot_filename(label, browser, first)}",
                thumb1_url=f"thumbnails/{path_key}/{screenshot_filename(label, browser, first)}",
                img2_url=f"{path_key}/{screenshot_filename(label, browser, second)}",
                thumb2_url=f"thumbnails/{path_key}/{screenshot_filename(label, browser, second)}",
                imgdiff_url=f"{path_key}/{diff_filename(label, browser)}",
                thumbdiff_url=f"thumbnails/{path_key}/{diff_filename(label, browser)}",
            ))
        entries.append(GalleryEntry(
            alias=path_key,
            domain1_name=first,
            domain1_url=join_url(config.domains[first], suffix),
            domain2_name=second,
            domain2_url=join_url(config.domains[second], suffix),
            widths=widths,
            max_diff=max_diff(widths),
        ))
    return rank_entries(entries)


def build_directory_entries(
    golden_dir: Path,
    current_dir: Path,
    output_dir: Path,
    threshold: float,
    summary: ComparisonSummary | None = None,
) -> list[GalleryEntry]:
    """One single-width entry per PNG name present in both directories."""
    entries = []
    for filename in find_matching_files(golden_dir, current_dir):
        stem = filename[: -len(".png")]
        diff_name = f"{stem}_diff.png"
        diff = lookup_diff(summary, filename, output_dir / f"{stem}_data.txt")
        width = GalleryWidth(
            width="comparison",
            diff=diff,
            threshold=exceeds_threshold(diff, threshold),
            img1_url=_relative_url(golden_dir / filename, output_dir),
            img2_url=_relative_url(current_dir / filename, output_dir),
            imgdiff_url=diff_name,
            thumb1_url=f"thumbnails/golden/{filename}",
            thumb2_url=f"thumbnails/current/{filename}",
            thumbdiff_url=f"thumbnails/diff/{diff_name}",
        )
        entries.append(GalleryEntry(
            alias=stem,
            domain1_name="golden",
            domain1_url=f"Golden: {filename}",
            domain2_name="current",
            domain2_url=f"Current: {filename}",
            widths=[width],
            max_diff=max_diff([width]),
        ))
    return rank_entries(entries)


def _relative_url(target: Path, start: Path) -> str:
    return Path(os.path.relpath(target.resolve(), start.resolve())).as_posix()
