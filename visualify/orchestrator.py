"""Pipeline orchestrator: coordinates capture, compare, thumbnail, and gallery stages."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from visualify.capture.orchestrator import CaptureOrchestrator
from visualify.compare.aggregator import ComparisonAggregator, load_summary
from visualify.errors import SetupError
from visualify.models.capture import CaptureRecord
from visualify.models.comparison import ComparisonSummary
from visualify.models.config import VisualifyConfig
from visualify.reporter.gallery import write_gallery
from visualify.reporter.ranker import build_config_entries, build_directory_entries
from visualify.reporter.thumbnails import thumbnail_comparison_dirs, thumbnail_config_paths

logger = logging.getLogger(__name__)


class Orchestrator:
    """Coordinates the config-driven pipeline over one output directory."""

    def __init__(self, config: VisualifyConfig):
        self.config = config
        self.directory = Path(config.directory)

    def run_all(self) -> dict:
        """Execute capture → compare → thumbnail → gallery."""
        start = time.time()
        logger.info("=== Starting visual regression run in %s ===", self.directory)

        logger.info("--- Stage 1: Capture ---")
        stage_start = time.time()
        records = self.run_capture()
        logger.info("--- Stage 1 complete: %d screenshots in %.1fs ---",
                    len(records), time.time() - stage_start)

        logger.info("--- Stage 2: Compare ---")
        stage_start = time.time()
        summary = self.run_compare()
        logger.info("--- Stage 2 complete: %d compared, %d failed in %.1fs ---",
                    summary.total_comparisons, summary.failed_comparisons,
                    time.time() - stage_start)

        logger.info("--- Stage 3: Thumbnails ---")
        stage_start = time.time()
        thumbs = self.run_thumbnails()
        logger.info("--- Stage 3 complete: %d thumbnails in %.1fs ---",
                    len(thumbs), time.time() - stage_start)

        logger.info("--- Stage 4: Gallery ---")
        gallery_path = self.run_gallery(summary)

        duration = time.time() - start
        logger.info("=== Run complete in %.1fs ===", duration)
        return {
            "duration": round(duration, 2),
            "screenshots": len(records),
            "summary": summary,
            "gallery": str(gallery_path),
        }

    def run_capture(self) -> list[CaptureRecord]:
        return asyncio.run(CaptureOrchestrator(self.config).run())

    def run_compare(self) -> ComparisonSummary:
        aggregator = ComparisonAggregator(
            threshold=self.config.threshold, max_width=self.config.max_width,
        )
        return aggregator.compare_config(self.config)

    def run_thumbnails(self) -> list[Path]:
        return thumbnail_config_paths(
            self.directory, list(self.config.paths),
            self.config.gallery.thumb_width, self.config.gallery.thumb_height,
        )

    def run_gallery(self, summary: ComparisonSummary | None = None) -> Path:
        if summary is None:
            summary = load_summary(self.directory)
        entries = build_config_entries(self.config, summary)
        return write_gallery(entries, self.directory, self.config.gallery.template)


def validate_directories(golden_dir: str, current_dir: str, output_dir: str | None) -> None:
    """Fatal setup checks for directory mode, run before any work starts."""
    if not output_dir:
        raise SetupError("Output directory (-o) is required")
    if not Path(golden_dir).is_dir():
        raise SetupError(f"Golden directory does not exist: {golden_dir}")
    if not Path(current_dir).is_dir():
        raise SetupError(f"Current directory does not exist: {current_dir}")


class DirectoryOrchestrator:
    """Golden-vs-current pipeline over two existing screenshot directories."""

    def __init__(self, golden_dir: str | Path, current_dir: str | Path, output_dir: str | Path | None):
        validate_directories(str(golden_dir), str(current_dir), str(output_dir) if output_dir else None)
        self.golden_dir = Path(golden_dir)
        self.current_dir = Path(current_dir)
        self.output_dir = Path(output_dir)

    def compare(self, threshold: float = 6.0, max_width: int | None = None) -> ComparisonSummary:
        aggregator = ComparisonAggregator(threshold=threshold, max_width=max_width)
        return aggregator.compare_directories(self.golden_dir, self.current_dir, self.output_dir)

    def thumbnails(self, width: int = 200, height: int = 400) -> list[Path]:
        return thumbnail_comparison_dirs(self.golden_dir, self.current_dir, self.output_dir, width, height)

    def gallery(self, threshold: float = 6.0, template: str = "slideshow_template") -> Path:
        summary = load_summary(self.output_dir)
        entries = build_directory_entries(
            self.golden_dir, self.current_dir, self.output_dir, threshold, summary,
        )
        if not entries:
            raise SetupError("No matching PNG files found between directories")
        return write_gallery(entries, self.output_dir, template)
