"""Capture orchestrator: drives Playwright through every path, domain and viewport."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from playwright.async_api import Browser, async_playwright

from visualify.errors import MaxRetriesReached, SetupError
from visualify.models.capture import CaptureRecord, CaptureTarget
from visualify.models.config import VisualifyConfig

from .browser import launch_browser, open_page
from .request_filter import AdBlocker
from .retry import SleepFn, retry_async
from .targets import build_targets, prepare_directories, screenshot_path

logger = logging.getLogger(__name__)


class CaptureOrchestrator:
    """Captures full-page screenshots sequentially with a single browser.

    For each configured path, each domain gets its own page: navigate once,
    then resize the viewport and snap every configured width. A failing
    (path, domain) sequence is retried from scratch on a fresh page; when
    retries run out the whole run aborts.
    """

    def __init__(self, config: VisualifyConfig, sleep: SleepFn = asyncio.sleep):
        self.config = config
        self.output_dir = Path(config.directory)
        self.sleep = sleep
        self.targets = build_targets(config)
        self.records: dict[str, CaptureRecord] = {
            t.key: CaptureRecord(target=t) for t in self.targets
        }

    async def run(self) -> list[CaptureRecord]:
        """Launch the browser, capture everything, and always close the browser."""
        if not self.config.domains:
            raise SetupError("No domains configured to capture")
        prepare_directories(self.output_dir, list(self.config.paths))

        start = time.time()
        logger.info("Capturing %d screenshots into %s", len(self.targets), self.output_dir)
        async with async_playwright() as p:
            browser = await launch_browser(
                p, headless=self.config.headless, no_sandbox=self.config.no_sandbox,
            )
            try:
                await self.capture_all(browser)
            finally:
                await browser.close()

        logger.info("Screenshots done in %.1fs", time.time() - start)
        return list(self.records.values())

    async def capture_all(self, browser: Browser) -> None:
        for path_key in self.config.paths:
            for domain_label in self.config.domains:
                await self.capture_path_on_domain(browser, path_key, domain_label)

    def targets_for(self, path_key: str, domain_label: str) -> list[CaptureTarget]:
        return [
            t for t in self.targets
            if t.path_key == path_key and t.domain_label == domain_label
        ]

    async def capture_path_on_domain(self, browser: Browser, path_key: str, domain_label: str) -> list[Path]:
        targets = self.targets_for(path_key, domain_label)
        if not targets:
            return []

        def on_failure(attempt: int, error: BaseException, will_retry: bool) -> None:
            status = "retrying" if will_retry else "failed"
            for t in targets:
                record = self.records[t.key]
                record.status = status
                record.error = str(error)
                record.screenshot_path = None
            logger.warning("Capture of %s on %s failed (attempt %d/%d): %s",
                           path_key, domain_label, attempt,
                           self.config.retry.max_attempts, error)

        outcome = await retry_async(
            lambda attempt: self._attempt(browser, targets, attempt),
            self.config.retry,
            sleep=self.sleep,
            on_failure=on_failure,
        )
        if not outcome.ok:
            raise MaxRetriesReached(path_key, domain_label, outcome.attempts, outcome.error)
        return outcome.value

    async def _attempt(self, browser: Browser, targets: list[CaptureTarget], attempt: int) -> list[Path]:
        first = targets[0]
        for t in targets:
            self.records[t.key].status = "in-progress"
            self.records[t.key].attempts = attempt

        logger.debug("Opening %s (attempt %d)", first.url, attempt)
        page = await open_page(
            browser,
            viewport={"width": first.viewport_width, "height": first.viewport_height},
            auth=self.config.auth,
        )
        written: list[Path] = []
        try:
            if self.config.block_ads:
                await AdBlocker(self.config.ad_hosts).install(page)
            await page.goto(first.url, timeout=self.config.navigation_timeout_seconds * 1000)

            for t in targets:
                path = screenshot_path(self.output_dir, t, self.config.browser)
                await page.set_viewport_size({"width": t.viewport_width, "height": t.viewport_height})
                await page.screenshot(path=str(path), full_page=True)
                written.append(path)
                record = self.records[t.key]
                record.status = "captured"
                record.screenshot_path = str(path)
                record.error = None
                logger.info("Snapped %s", path)
        except Exception:
            for path in written:
                path.unlink(missing_ok=True)
            raise
        finally:
            await page.close()
        return written
