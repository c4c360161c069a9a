"""Browser launch and page creation for screenshot capture."""

from __future__ import annotations

from typing import Optional

from playwright.async_api import Browser, Page, Playwright

from visualify.models.config import AuthConfig


async def launch_browser(
    playwright: Playwright,
    headless: bool = True,
    no_sandbox: bool = False,
) -> Browser:
    """Launch Chromium. ``no_sandbox`` is needed when running as root in a container."""
    args = ["--no-sandbox"] if no_sandbox else []
    return await playwright.chromium.launch(headless=headless, args=args)


async def open_page(
    browser: Browser,
    viewport: dict,
    auth: Optional[AuthConfig] = None,
) -> Page:
    """Open a page in its own context; closing the page closes the context."""
    page_kwargs: dict = {"viewport": viewport}
    if auth:
        page_kwargs["http_credentials"] = {
            "username": auth.username,
            "password": auth.password,
        }
    return await browser.new_page(**page_kwargs)
