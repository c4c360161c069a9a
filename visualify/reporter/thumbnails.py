"""Thumbnail generation for the gallery."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


def make_thumbnail(source: Path, target: Path, width: int, height: int) -> None:
    """Resize to cover width × height, cropping from the bottom so the page top stays visible."""
    with Image.open(source) as img:
        thumb = ImageOps.fit(img, (width, height), centering=(0.5, 0.0))
    target.parent.mkdir(parents=True, exist_ok=True)
    thumb.save(target, format="PNG")


def thumbnail_directory(
    source_dir: Path,
    target_dir: Path,
    width: int,
    height: int,
    pattern: str = "*.png",
) -> list[Path]:
    """Thumbnail every matching image; unreadable files are skipped with a warning."""
    target_dir.mkdir(parents=True, exist_ok=True)
    created = []
    for source in sorted(source_dir.glob(pattern)):
        if not source.is_file():
            continue
        target = target_dir / source.name
        logger.debug("Creating thumbnail for %s", source.name)
        try:
            make_thumbnail(source, target, width, height)
            created.append(target)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning("Could not create thumbnail for %s: %s", source.name, e)
    return created


def thumbnail_config_paths(directory: Path, path_keys: list[str], width: int, height: int) -> list[Path]:
    """Config mode: {directory}/{path}/*.png -> {directory}/thumbnails/{path}/."""
    created = []
    for path_key in path_keys:
        source_dir = directory / path_key
        if not source_dir.exists():
            logger.warning("No screenshots directory for %s", path_key)
            continue
        created += thumbnail_directory(source_dir, directory / "thumbnails" / path_key, width, height)
    logger.info("Generated %d thumbnails", len(created))
    return created


def thumbnail_comparison_dirs(
    golden_dir: Path,
    current_dir: Path,
    output_dir: Path,
    width: int,
    height: int,
) -> list[Path]:
    """Directory mode: golden, current and diff images under {output}/thumbnails/."""
    thumbs_dir = output_dir / "thumbnails"
    logger.info("Processing golden screenshots...")
    created = thumbnail_directory(golden_dir, thumbs_dir / "golden", width, height)
    logger.info("Processing current screenshots...")
    created += thumbnail_directory(current_dir, thumbs_dir / "current", width, height)
    if output_dir.exists() and any(output_dir.glob("*_diff.png")):
        logger.info("Processing diff images...")
        created += thumbnail_directory(output_dir, thumbs_dir / "diff", width, height, pattern="*_diff.png")
    logger.info("Generated %d thumbnails", len(created))
    return created
