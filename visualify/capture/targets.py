"""Capture target expansion and deterministic screenshot paths."""

from __future__ import annotations

from pathlib import Path

from visualify.models.capture import CaptureTarget, parse_viewport
from visualify.models.config import VisualifyConfig
from visualify.url_utils import join_url


def build_targets(config: VisualifyConfig) -> list[CaptureTarget]:
    """Expand paths × domains × widths, in configuration order."""
    targets = []
    for path_key, suffix in config.paths.items():
        for domain_label, base_url in config.domains.items():
            url = join_url(base_url, suffix)
            for width in config.screen_widths:
                vp_width, vp_height = parse_viewport(width)
                targets.append(CaptureTarget(
                    path_key=path_key,
                    url=url,
                    viewport_width=vp_width,
                    viewport_height=vp_height,
                    domain_label=domain_label,
                    width_label=str(width),
                ))
    return targets


def screenshot_path(output_dir: Path, target: CaptureTarget, browser_label: str) -> Path:
    return output_dir / target.path_key / f"{target.width_label}_{browser_label}_{target.domain_label}.png"


def prepare_directories(output_dir: Path, path_keys: list[str]) -> None:
    """Create the screenshot and thumbnail directories for every path."""
    (output_dir / "thumbnails").mkdir(parents=True, exist_ok=True)
    for path_key in path_keys:
        (output_dir / path_key).mkdir(parents=True, exist_ok=True)
        (output_dir / "thumbnails" / path_key).mkdir(parents=True, exist_ok=True)
