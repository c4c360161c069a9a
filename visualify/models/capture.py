"""Capture target data structures."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

DEFAULT_VIEWPORT_HEIGHT = 800


def parse_viewport(width: Union[int, str]) -> tuple[int, int]:
    """Convert a configured width (``1024`` or ``"1024x768"``) into (width, height).

    Height defaults to 800 when only a width is given.
    """
    if isinstance(width, bool):
        raise ValueError(f"Invalid screen width: {width!r}")
    if isinstance(width, int):
        if width <= 0:
            raise ValueError(f"Screen width must be positive: {width}")
        return width, DEFAULT_VIEWPORT_HEIGHT

    text = str(width).strip().lower()
    w_part, sep, h_part = text.partition("x")
    try:
        w = int(w_part)
        h = int(h_part) if sep else DEFAULT_VIEWPORT_HEIGHT
    except ValueError:
        raise ValueError(f"Invalid screen width: {width!r} (expected WIDTH or WIDTHxHEIGHT)") from None
    if w <= 0 or h <= 0:
        raise ValueError(f"Screen dimensions must be positive: {width!r}")
    return w, h


class CaptureTarget(BaseModel):
    """One screenshot to take: a path at a viewport on a domain."""

    model_config = ConfigDict(frozen=True)

    path_key: str
    url: str
    viewport_width: int
    viewport_height: int
    domain_label: str
    width_label: str  # the width as configured, used in file names

    @property
    def key(self) -> str:
        return f"{self.path_key}/{self.width_label}/{self.domain_label}"


class CaptureRecord(BaseModel):
    target: CaptureTarget
    status: str = "pending"  # pending, in-progress, captured, retrying, failed
    attempts: int = 0
    screenshot_path: Optional[str] = None
    error: Optional[str] = None
