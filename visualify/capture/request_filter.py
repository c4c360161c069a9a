"""Request interception: drops requests to known ad-serving hosts."""

from __future__ import annotations

import logging

from playwright.async_api import Page, Route

from visualify.url_utils import host_matches, host_of

logger = logging.getLogger(__name__)


def is_blocked_request(url: str, ad_hosts: list[str]) -> bool:
    return host_matches(host_of(url), ad_hosts)


class AdBlocker:
    """Playwright route handler that aborts ad requests and lets everything else through."""

    def __init__(self, ad_hosts: list[str]):
        self.ad_hosts = ad_hosts
        self.blocked_count = 0

    async def handle(self, route: Route) -> None:
        url = route.request.url
        if is_blocked_request(url, self.ad_hosts):
            self.blocked_count += 1
            logger.debug("Blocked ad request: %s", url)
            await route.abort()
        else:
            await route.continue_()

    async def install(self, page: Page) -> None:
        await page.route("**/*", self.handle)
