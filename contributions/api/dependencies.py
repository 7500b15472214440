from collections.abc import AsyncIterator

import httpx
from fastapi import Depends

from contributions.clients.browser_client import HeadlessBrowser
from contributions.clients.github_client import CalendarPageFetcher
from contributions.services.cache_service import ContributionCacheService
from contributions.services.contribution_service import ContributionService
from contributions.services.settings_service import SettingsService
from contributions.settings import Settings


def get_settings() -> Settings:
    return Settings()


def get_settings_service(settings: Settings = Depends(get_settings)) -> SettingsService:
    return SettingsService(settings.user_settings_path)


async def get_contribution_service(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[ContributionService]:
    """Yield a service bound to an HTTP client that lives for one request."""

    browser = None
    if settings.browser_enabled:
        browser = HeadlessBrowser(
            user_agent=settings.user_agent,
            timeout_seconds=settings.browser_timeout_seconds,
            poll_interval_seconds=settings.browser_poll_interval_seconds,
        )

    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout_seconds,
        follow_redirects=True,
    ) as client:
        yield ContributionService(
            fetcher=CalendarPageFetcher(
                http_client=client,
                browser=browser,
                base_url=settings.github_base_url,
            ),
            cache=ContributionCacheService(settings.cache_dir),
        )
