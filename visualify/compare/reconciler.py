"""Image reconciler: brings two screenshots to a common canvas before diffing.

Padding uses an opaque sentinel colour rather than transparency so that any
area added during reconciliation stands out on the diff image. Reviewers use
the yellow strips to tell size mismatches apart from real regressions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from visualify.errors import ImageDecodeError

logger = logging.getLogger(__name__)

SENTINEL_COLOR = (255, 255, 0, 255)


@dataclass
class ReconciledPair:
    image_a: Image.Image
    image_b: Image.Image
    a_changed: bool = False
    b_changed: bool = False

    @property
    def size(self) -> tuple[int, int]:
        return self.image_a.size


def load_image(path: str | Path) -> Image.Image:
    """Decode an image fully into RGBA, raising ImageDecodeError on failure."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.convert("RGBA")
    except (FileNotFoundError, UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageDecodeError(f"Cannot read image {path}: {e}") from e


def fit_to_canvas(image: Image.Image, width: int, height: int) -> tuple[Image.Image, bool]:
    """Crop the right/bottom overflow and pad the remainder with the sentinel colour.

    Content stays anchored at the top-left corner. Returns the image and whether
    it was modified.
    """
    if image.size == (width, height):
        return image, False

    if image.width > width or image.height > height:
        image = image.crop((0, 0, min(image.width, width), min(image.height, height)))
    if image.size == (width, height):
        return image, True

    canvas = Image.new("RGBA", (width, height), SENTINEL_COLOR)
    canvas.paste(image, (0, 0))
    return canvas, True


def reconcile_images(
    image_a: Image.Image,
    image_b: Image.Image,
    max_width: int | None = None,
) -> ReconciledPair:
    """Return both images on a canvas of max(width) × max(height).

    ``max_width`` caps the target width; wider images are then cropped on the
    right instead of the narrower one being padded.
    """
    width = max(image_a.width, image_b.width)
    if max_width is not None:
        width = min(width, max_width)
    height = max(image_a.height, image_b.height)

    new_a, a_changed = fit_to_canvas(image_a, width, height)
    new_b, b_changed = fit_to_canvas(image_b, width, height)
    return ReconciledPair(new_a, new_b, a_changed, b_changed)


def reconcile_files(
    path_a: str | Path,
    path_b: str | Path,
    max_width: int | None = None,
) -> ReconciledPair:
    """Reconcile two image files, overwriting any file whose image was adjusted."""
    image_a = load_image(path_a)
    image_b = load_image(path_b)

    pair = reconcile_images(image_a, image_b, max_width=max_width)

    if pair.a_changed:
        logger.warning("Adjusted %s from %dx%d to %dx%d",
                       path_a, image_a.width, image_a.height, *pair.size)
        _overwrite(pair.image_a, path_a)
    if pair.b_changed:
        logger.warning("Adjusted %s from %dx%d to %dx%d",
                       path_b, image_b.width, image_b.height, *pair.size)
        _overwrite(pair.image_b, path_b)
    return pair


def _overwrite(image: Image.Image, path: str | Path) -> None:
    try:
        image.save(path, format="PNG")
    except OSError as e:
        raise ImageDecodeError(f"Cannot write reconciled image {path}: {e}") from e
