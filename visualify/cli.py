"""CLI entry point for visualify."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from visualify.errors import VisualifyError
from visualify.models.comparison import ComparisonSummary
from visualify.models.config import VisualifyConfig
from visualify.orchestrator import DirectoryOrchestrator, Orchestrator

console = Console()

DEFAULT_CONFIG_FILE = "visualify.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _fail(message: object) -> NoReturn:
    console.print(f"[red]{escape(str(message))}[/red]")
    sys.exit(1)


def _load_config(
    config_file: str,
    defaults_file: str | None,
    domains: tuple[str, ...] = (),
    output_directory: str | None = None,
    debug: bool = False,
    allow_root: bool = False,
) -> VisualifyConfig:
    try:
        cfg = VisualifyConfig.load(config_file, defaults_file)
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        console.print("Run 'visualify init' to create a default config.")
        sys.exit(1)
    except (ValidationError, ValueError) as e:
        _fail(f"Invalid configuration: {e}")

    cfg = cfg.with_overrides(domains=domains, directory=output_directory)
    if debug:
        cfg.headless = False
    if allow_root:
        cfg.no_sandbox = True
    return cfg


_CONFIG_OPTIONS = [
    click.option("--config-file", "-c", default=DEFAULT_CONFIG_FILE, show_default=True,
                 help="Configuration file (JSON or YAML)"),
    click.option("--defaults-file", "-d", default=None,
                 help="Default configuration to layer under the config file"),
    click.option("--output-directory", "-o", default=None,
                 help="Output directory, overrides the config file"),
]


def config_options(func):
    """Options shared by every config-driven command."""
    for option in reversed(_CONFIG_OPTIONS):
        func = option(func)
    return func


def print_summary(summary: ComparisonSummary) -> None:
    if summary.results:
        table = Table(title=f"Comparison Results (threshold {summary.threshold}%)")
        table.add_column("Pair", style="bold")
        table.add_column("Diff %", justify="right")
        table.add_column("Result")
        for r in summary.results:
            status = "[green]PASS[/green]" if r.passed else "[red]FAIL[/red]"
            if r.error:
                status += f" [red]({r.error})[/red]"
            table.add_row(r.identifier, f"{r.diff_percentage:.2f}", status)
        console.print(table)
    console.print(
        f"Total files: {summary.total_comparisons}  "
        f"Failed: {summary.failed_comparisons}  "
        f"Passed: {summary.passed_comparisons}"
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression testing: capture, compare and review two sites."""
    setup_logging(verbose)


@cli.command()
@click.argument("domains", nargs=-1)
@config_options
@click.option("--debug", is_flag=True, help="Show the browser while taking screenshots")
@click.option("--allow-root", "-r", is_flag=True, help="Launch Chromium with --no-sandbox")
def capture(domains, config_file, defaults_file, output_directory, debug, allow_root) -> None:
    """Capture screenshots of every path, width and domain."""
    cfg = _load_config(config_file, defaults_file, domains, output_directory, debug, allow_root)
    try:
        records = Orchestrator(cfg).run_capture()
    except VisualifyError as e:
        _fail(e)
    console.print(f"[green]Screenshots done![/green] {len(records)} captured in {cfg.directory}")


@cli.command()
@click.argument("domains", nargs=-1)
@config_options
def compare(domains, config_file, defaults_file, output_directory) -> None:
    """Compare captured screenshots across the two domains."""
    cfg = _load_config(config_file, defaults_file, domains, output_directory)
    try:
        summary = Orchestrator(cfg).run_compare()
    except VisualifyError as e:
        _fail(e)
    print_summary(summary)
    sys.exit(summary.exit_code)


@cli.command()
@config_options
def thumbnail(config_file, defaults_file, output_directory) -> None:
    """Generate thumbnails for captured screenshots and diffs."""
    cfg = _load_config(config_file, defaults_file, output_directory=output_directory)
    thumbs = Orchestrator(cfg).run_thumbnails()
    console.print(f"[green]Thumbnails generated![/green] {len(thumbs)} files")


@cli.command()
@click.argument("domains", nargs=-1)
@config_options
def gallery(domains, config_file, defaults_file, output_directory) -> None:
    """Render gallery.html, largest difference first."""
    cfg = _load_config(config_file, defaults_file, domains, output_directory)
    try:
        path = Orchestrator(cfg).run_gallery()
    except VisualifyError as e:
        _fail(e)
    console.print(f"[green]Gallery generated:[/green] [blue]{path}[/blue]")


@cli.command("all")
@click.argument("domains", nargs=-1)
@config_options
@click.option("--debug", is_flag=True, help="Show the browser while taking screenshots")
@click.option("--allow-root", "-r", is_flag=True, help="Launch Chromium with --no-sandbox")
def run_all(domains, config_file, defaults_file, output_directory, debug, allow_root) -> None:
    """Run capture, compare, thumbnail and gallery in sequence."""
    cfg = _load_config(config_file, defaults_file, domains, output_directory, debug, allow_root)
    try:
        results = Orchestrator(cfg).run_all()
    except VisualifyError as e:
        _fail(e)

    summary: ComparisonSummary = results["summary"]
    console.print("\n[bold green]Run Complete[/bold green]")
    print_summary(summary)
    console.print(f"  Gallery: [blue]{results['gallery']}[/blue]")
    sys.exit(summary.exit_code)


@cli.command("compare-dirs")
@click.argument("golden_dir")
@click.argument("current_dir")
@click.option("--output-directory", "-o", default=None, help="Output directory for results (required)")
@click.option("--threshold", "-t", type=float, default=6.0, show_default=True,
              help="Percentage threshold for failures")
@click.option("--max-width", type=click.IntRange(min=1), default=None,
              help="Crop screenshots wider than this instead of padding the narrower one")
def compare_dirs(golden_dir, current_dir, output_directory, threshold, max_width) -> None:
    """Compare same-named PNGs in GOLDEN_DIR and CURRENT_DIR."""
    try:
        runner = DirectoryOrchestrator(golden_dir, current_dir, output_directory)
        summary = runner.compare(threshold, max_width=max_width)
    except VisualifyError as e:
        _fail(e)

    if summary.total_comparisons == 0:
        console.print("[yellow]No matching PNG files found between directories[/yellow]")
    print_summary(summary)
    if summary.failed_comparisons:
        console.print(f"[red]Exiting with code 1: {summary.failed_comparisons} "
                      f"comparisons exceeded threshold[/red]")
    else:
        console.print("[green]All comparisons passed threshold[/green]")
    sys.exit(summary.exit_code)


@cli.command("thumbnail-dirs")
@click.argument("golden_dir")
@click.argument("current_dir")
@click.option("--output-directory", "-o", default=None, help="Output directory for thumbnails (required)")
@click.option("--thumb-width", type=int, default=200, show_default=True)
@click.option("--thumb-height", type=int, default=400, show_default=True)
def thumbnail_dirs(golden_dir, current_dir, output_directory, thumb_width, thumb_height) -> None:
    """Generate thumbnails for golden, current and diff images."""
    try:
        runner = DirectoryOrchestrator(golden_dir, current_dir, output_directory)
    except VisualifyError as e:
        _fail(e)
    thumbs = runner.thumbnails(thumb_width, thumb_height)
    console.print(f"[green]Thumbnail generation complete![/green] {len(thumbs)} files")


@cli.command("gallery-dirs")
@click.argument("golden_dir")
@click.argument("current_dir")
@click.option("--output-directory", "-o", default=None, help="Output directory for the gallery (required)")
@click.option("--threshold", "-t", type=float, default=6.0, show_default=True,
              help="Percentage threshold for highlighting failures")
@click.option("--template", default="slideshow_template", show_default=True,
              help="Template name (without extension)")
def gallery_dirs(golden_dir, current_dir, output_directory, threshold, template) -> None:
    """Render a gallery for a golden-vs-current comparison."""
    try:
        runner = DirectoryOrchestrator(golden_dir, current_dir, output_directory)
        path = runner.gallery(threshold, template)
    except VisualifyError as e:
        _fail(f"Error generating gallery: {e}")
    console.print(f"[green]Gallery generated:[/green] [blue]{path}[/blue]")


@cli.command()
@click.option("--domain1", prompt="Reference site URL", help="Base URL of the reference site")
@click.option("--domain2", prompt="Site under test URL", help="Base URL of the site under test")
@click.option("--config-file", "-c", default=DEFAULT_CONFIG_FILE, show_default=True)
def init(domain1: str, domain2: str, config_file: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config_file)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = VisualifyConfig(domains={"domain1": domain1, "domain2": domain2})
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nEdit the paths and screen widths, then run:")
    console.print("  [blue]visualify all[/blue]")


if __name__ == "__main__":
    cli()
