"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from visualify.models.config import GalleryConfig, RetryConfig, VisualifyConfig

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


# ============================================================================
# Image Fixtures
# ============================================================================


def write_png(path: Path, size: tuple[int, int], color=WHITE) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="PNG")
    return path


@pytest.fixture
def make_png() -> Callable[..., Path]:
    """Factory writing a solid-colour PNG: make_png(path, (w, h), color)."""
    return write_png


@pytest.fixture
def golden_and_current(tmp_path: Path) -> tuple[Path, Path, Path]:
    """Empty golden, current and output directories."""
    golden = tmp_path / "golden"
    current = tmp_path / "current"
    output = tmp_path / "output"
    golden.mkdir()
    current.mkdir()
    return golden, current, output


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def visualify_config(tmp_path: Path) -> VisualifyConfig:
    """Two domains, two paths, two widths, writing under tmp_path/shots."""
    return VisualifyConfig(
        directory=str(tmp_path / "shots"),
        domains={
            "domain1": "https://live.example.com",
            "domain2": "https://staging.example.com",
        },
        paths={"home": "/", "about": "/about"},
        screen_widths=[320, "1024x768"],
        threshold=6.0,
        retry=RetryConfig(max_attempts=5, delay_seconds=1.0),
        gallery=GalleryConfig(template="grid_template", thumb_width=50, thumb_height=100),
    )


@pytest.fixture
def shots_for_config(visualify_config: VisualifyConfig) -> VisualifyConfig:
    """Write identical screenshots for every path/width/domain of the config."""
    base = Path(visualify_config.directory)
    for path_key in visualify_config.paths:
        for width in visualify_config.screen_widths:
            for domain in visualify_config.domains:
                write_png(base / path_key / f"{width}_chrome_{domain}.png", (20, 30), WHITE)
    return visualify_config


# ============================================================================
# Playwright Fixtures
# ============================================================================


def make_page() -> AsyncMock:
    """A Playwright page double whose screenshot() writes a small file."""
    page = AsyncMock()

    async def fake_screenshot(path: str, full_page: bool = False):
        Path(path).write_bytes(b"png")

    page.screenshot = AsyncMock(side_effect=fake_screenshot)
    return page


@pytest.fixture
def mock_browser() -> AsyncMock:
    """Browser double that opens a fresh page double on every new_page()."""
    browser = AsyncMock()
    browser.pages = []

    async def new_page(**kwargs):
        page = make_page()
        browser.pages.append(page)
        return page

    browser.new_page = AsyncMock(side_effect=new_page)
    return browser


@pytest.fixture
def page_factory() -> Callable[[], AsyncMock]:
    return make_page


@pytest.fixture
def failing_browser() -> Callable[[int], AsyncMock]:
    """Factory for a browser double whose first N pages fail to navigate."""

    def factory(failures: int) -> AsyncMock:
        browser = AsyncMock()
        browser.pages = []

        async def new_page(**kwargs):
            page = make_page()
            if len(browser.pages) < failures:
                page.goto = AsyncMock(side_effect=TimeoutError("navigation timed out"))
            browser.pages.append(page)
            return page

        browser.new_page = AsyncMock(side_effect=new_page)
        return browser

    return factory
