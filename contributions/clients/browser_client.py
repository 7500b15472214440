import asyncio
import logging
from time import monotonic
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright


logger = logging.getLogger(__name__)

CALENDAR_READY_SCRIPT = """
() => {
    if (document.readyState !== 'complete') return false;
    return !!document.querySelector('table.ContributionCalendar-grid.js-calendar-graph-table');
}
"""


class HeadlessBrowser:
    """Loads pages in headless Chromium so client-side rendering can finish."""

    def __init__(
        self,
        user_agent: str,
        timeout_seconds: float = 20.0,
        poll_interval_seconds: float = 0.4,
    ) -> None:
        self.user_agent = user_agent
        self.timeout_seconds = max(0.1, timeout_seconds)
        self.poll_interval_seconds = max(0.05, poll_interval_seconds)

    async def load_html(self, url: str) -> str:
        """Return the hydrated page HTML, or an empty string on any failure."""

        if not url or not url.strip():
            return ""

        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True)
                try:
                    page = await browser.new_page(user_agent=self.user_agent)
                    await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=self.timeout_seconds * 1000,
                    )
                    return await self.wait_for_calendar(page)
                finally:
                    await browser.close()
        except Exception:
            logger.warning("Headless browser failed to load %s", url, exc_info=True)
            return ""

    async def wait_for_calendar(self, page: Any) -> str:
        """Poll the page until the contribution calendar table exists."""

        deadline = monotonic() + self.timeout_seconds
        while monotonic() < deadline:
            if await self._is_calendar_ready(page):
                return await page.content()
            await asyncio.sleep(self.poll_interval_seconds)

        logger.info("Contribution calendar did not appear within %.1fs", self.timeout_seconds)
        return ""

    @staticmethod
    async def _is_calendar_ready(page: Any) -> bool:
        try:
            return bool(await page.evaluate(CALENDAR_READY_SCRIPT))
        except PlaywrightError:
            return False
