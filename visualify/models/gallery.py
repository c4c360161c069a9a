"""Gallery data structures consumed by the HTML templates."""

from __future__ import annotations

from pydantic import BaseModel, Field

NOT_DETECTED = "Not detected"


class GalleryWidth(BaseModel):
    width: str
    diff: str = NOT_DETECTED  # percentage string as written to the data file
    threshold: bool = False  # presentation highlight only
    img1_url: str
    thumb1_url: str
    img2_url: str
    thumb2_url: str
    imgdiff_url: str
    thumbdiff_url: str


class GalleryEntry(BaseModel):
    alias: str
    domain1_name: str
    domain1_url: str
    domain2_name: str
    domain2_url: str
    diff_name: str = "diff"
    widths: list[GalleryWidth] = Field(default_factory=list)
    max_diff: float = 0.0
