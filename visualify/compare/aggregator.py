"""Comparison aggregator: runs the diff evaluator over a matrix of pairs."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from visualify.errors import SetupError
from visualify.models.comparison import ComparisonPair, ComparisonResult, ComparisonSummary
from visualify.models.config import VisualifyConfig

from .diff_evaluator import evaluate_pair, format_percentage

logger = logging.getLogger(__name__)

SUMMARY_FILENAME = "comparison_summary.json"
COMBINED_LOG_FILENAME = "comparison_log.txt"


def screenshot_filename(width_label: str, browser: str, domain_label: str) -> str:
    return f"{width_label}_{browser}_{domain_label}.png"


def diff_filename(width_label: str, browser: str) -> str:
    return f"{width_label}_{browser}_diff.png"


def data_filename(width_label: str, browser: str) -> str:
    return f"{width_label}_{browser}_data.txt"


def build_config_pairs(config: VisualifyConfig) -> list[ComparisonPair]:
    """Expand paths × widths into pairs across the first two configured domains."""
    labels = config.domain_labels
    if len(labels) < 2:
        raise SetupError(f"Comparison needs two domains, {len(labels)} configured")
    first, second = labels[:2]

    base_dir = Path(config.directory)
    pairs = []
    for path_key in config.paths:
        path_dir = base_dir / path_key
        for width in config.screen_widths:
            width_label = str(width)
            pairs.append(ComparisonPair(
                identifier=f"{path_key}/{width_label}",
                path_key=path_key,
                width_label=width_label,
                image_a=str(path_dir / screenshot_filename(width_label, config.browser, first)),
                image_b=str(path_dir / screenshot_filename(width_label, config.browser, second)),
                diff_path=str(path_dir / diff_filename(width_label, config.browser)),
                data_path=str(path_dir / data_filename(width_label, config.browser)),
            ))
    return pairs


def find_matching_files(golden_dir: Path, current_dir: Path) -> list[str]:
    """PNG file names present in both directories, in sorted order."""
    golden = {p.name for p in golden_dir.iterdir() if p.is_file() and p.suffix == ".png"}
    current = {p.name for p in current_dir.iterdir() if p.is_file() and p.suffix == ".png"}
    return sorted(golden & current)


def build_directory_pairs(golden_dir: Path, current_dir: Path, output_dir: Path) -> list[ComparisonPair]:
    pairs = []
    for filename in find_matching_files(golden_dir, current_dir):
        stem = filename[: -len(".png")]
        pairs.append(ComparisonPair(
            identifier=filename,
            width_label="comparison",
            image_a=str(golden_dir / filename),
            image_b=str(current_dir / filename),
            diff_path=str(output_dir / f"{stem}_diff.png"),
            data_path=str(output_dir / f"{stem}_data.txt"),
        ))
    return pairs


class ComparisonAggregator:
    """Evaluates pairs in discovery order and keeps the running pass/fail count."""

    def __init__(self, threshold: float = 6.0, max_width: int | None = None):
        self.threshold = threshold
        self.max_width = max_width

    def run(self, pairs: list[ComparisonPair]) -> ComparisonSummary:
        summary = ComparisonSummary(threshold=self.threshold)
        for pair in pairs:
            logger.info("Comparing %s", pair.identifier)
            result = evaluate_pair(pair, self.threshold, max_width=self.max_width)
            self._record(summary, result)
        return summary

    def _record(self, summary: ComparisonSummary, result: ComparisonResult) -> None:
        summary.results.append(result)
        summary.total_comparisons += 1
        pct = format_percentage(result.diff_percentage)
        if result.diff_percentage > self.threshold:
            summary.failed_comparisons += 1
            logger.warning("FAIL: %s - %s%% (threshold: %s%%)",
                           result.identifier, pct, self.threshold)
        else:
            logger.info("PASS: %s - %s%%", result.identifier, pct)

    def compare_config(self, config: VisualifyConfig) -> ComparisonSummary:
        """Config-driven mode: diff every path/width across the two domains."""
        pairs = build_config_pairs(config)
        summary = self.run(pairs)
        out_dir = Path(config.directory)
        write_summary(summary, out_dir)
        write_combined_log(summary, out_dir)
        return summary

    def compare_directories(
        self, golden_dir: Path, current_dir: Path, output_dir: Path,
    ) -> ComparisonSummary:
        """Directory-driven mode: diff every PNG name present in both directories."""
        output_dir.mkdir(parents=True, exist_ok=True)
        pairs = build_directory_pairs(golden_dir, current_dir, output_dir)
        if not pairs:
            logger.warning("No matching PNG files found between directories")
            return ComparisonSummary(threshold=self.threshold)

        logger.info("Found %d matching files to compare", len(pairs))
        summary = self.run(pairs)
        write_summary(summary, output_dir)
        return summary


def write_summary(summary: ComparisonSummary, output_dir: Path) -> Path:
    path = output_dir / SUMMARY_FILENAME
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(summary.model_dump(by_alias=True), f, indent=2)
    logger.debug("Saved comparison summary to %s", path)
    return path


def load_summary(output_dir: Path) -> ComparisonSummary | None:
    """Load a previously written summary, or None when absent or unreadable."""
    path = output_dir / SUMMARY_FILENAME
    if not path.exists():
        return None
    try:
        with open(path) as f:
            return ComparisonSummary.model_validate(json.load(f))
    except Exception as e:
        logger.warning("Could not load comparison summary %s: %s", path, e)
        return None


def write_combined_log(summary: ComparisonSummary, output_dir: Path) -> Path:
    path = output_dir / COMBINED_LOG_FILENAME
    lines = []
    for r in summary.results:
        status = "PASS" if r.passed else "FAIL"
        line = f"{r.path_key}\t{r.width_label}\t{format_percentage(r.diff_percentage)}\t{status}"
        if r.error:
            line += f"\t{r.error}"
        lines.append(line)
    path.write_text("\n".join(lines) + "\n" if lines else "")
    return path
