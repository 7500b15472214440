import logging
from urllib.parse import urlencode

import httpx

from contributions.clients.browser_client import HeadlessBrowser
from contributions.services.calendar_parser import has_calendar_table


logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when GitHub has no public profile for the username."""


class GitHubFetchError(Exception):
    """Raised when GitHub pages cannot be retrieved."""


class CalendarPageFetcher:
    """Retrieves profile and contribution-calendar HTML from github.com.

    The profile page is first loaded in a headless browser when one is
    configured and falls back to a plain HTTP GET when the browser yields no
    calendar.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        browser: HeadlessBrowser | None = None,
        base_url: str = "https://github.com",
    ) -> None:
        self.http_client = http_client
        self.browser = browser
        self.base_url = base_url.rstrip("/")

    def contributions_url(self, username: str) -> str:
        return f"{self.base_url}/users/{username}/contributions"

    def profile_url(self, username: str) -> str:
        return f"{self.base_url}/{username}"

    async def fetch_profile_page(
        self, username: str, params: dict[str, str] | None = None
    ) -> str:
        query = {"tab": "contributions", **(params or {})}
        url = self.profile_url(username)

        if self.browser is not None:
            html = await self.browser.load_html(f"{url}?{urlencode(query)}")
            if html and has_calendar_table(html):
                return html
            logger.info("Browser returned no calendar for %s, using HTTP", username)

        return await self._get(url, query)

    async def fetch_calendar_html(self, username: str, from_date: str, to_date: str) -> str:
        """Fetch calendar markup for a date range, trying the lightweight fragment first."""

        params = {"from": from_date, "to": to_date}
        html = await self._get(self.contributions_url(username), params)
        if has_calendar_table(html):
            return html

        logger.info(
            "Contributions fragment for %s %s..%s had no calendar, trying profile page",
            username,
            from_date,
            to_date,
        )
        return await self.fetch_profile_page(username, params)

    async def _get(self, url: str, params: dict[str, str]) -> str:
        try:
            response = await self.http_client.get(
                url,
                params=params,
                headers={"x-requested-with": "XMLHttpRequest"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise ProfileNotFoundError(url) from exc
            raise GitHubFetchError(
                f"GitHub returned {exc.response.status_code} for {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GitHubFetchError(f"GitHub request failed for {url}") from exc

        return response.text
