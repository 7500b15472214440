from collections.abc import Callable
from datetime import date
from datetime import timedelta
from threading import get_ident

import httpx
import pytest

from contributions.clients.github_client import CalendarPageFetcher
from contributions.clients.github_client import GitHubFetchError
from contributions.clients.github_client import ProfileNotFoundError
from contributions.models import SelectionKind
from contributions.models import YearSelection
from contributions.services.cache_service import ContributionCacheService
from contributions.services.contribution_service import ContributionService
from contributions.services.contribution_service import YearNotFoundError
from contributions.services.contribution_service import select_view


pytestmark = pytest.mark.anyio

TODAY = date(2024, 6, 15)


class FakeBrowser:
    def __init__(self, html: str = "") -> None:
        self.html = html
        self.urls: list[str] = []

    async def load_html(self, url: str) -> str:
        self.urls.append(url)
        return self.html


def build_service(
    handler: Callable[[httpx.Request], httpx.Response],
    cache_dir,
    today: date = TODAY,
    browser: FakeBrowser | None = None,
) -> tuple[ContributionService, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    fetcher = CalendarPageFetcher(client, browser=browser, base_url="https://github.test")
    service = ContributionService(
        fetcher=fetcher,
        cache=ContributionCacheService(cache_dir),
        today=lambda: today,
    )
    return service, client


def year_links() -> list[tuple[str, str]]:
    return [
        ("2024", "/octocat?tab=overview&from=2024-01-01&to=2024-06-15"),
        ("2023", "/octocat?tab=overview&from=2023-01-01&to=2023-12-31"),
    ]


def github_handler(calendar_html, requests: list[httpx.Request]):
    """Serve year links on the profile page and one year per contributions fragment."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/octocat":
            return httpx.Response(200, text=calendar_html([], year_links=year_links()))

        if request.url.path == "/users/octocat/contributions":
            from_date = request.url.params["from"]
            if from_date.startswith("2023"):
                html = calendar_html(
                    [
                        ("2022-12-31", 4, 9),
                        ("2023-03-01", 2, 3),
                        ("2023-12-31", 1, 1),
                    ],
                    heading="40 contributions in 2023",
                )
            else:
                html = calendar_html(
                    [("2023-12-31", 1, 1), ("2024-01-02", 3, 6), ("2024-06-15", 4, 10)]
                )
            return httpx.Response(200, text=html)

        return httpx.Response(404)

    return handler


async def test_default_view_fetches_each_calendar_year_once_and_dedupes(
    calendar_html, tmp_path
) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        data = await service.load("octocat", YearSelection())

    assert [(r.url.params["from"], r.url.params["to"]) for r in requests] == [
        ("2023-06-11", "2023-12-31"),
        ("2024-01-01", "2024-06-15"),
    ]
    assert [c.date for c in data.default_contributions] == [
        date(2023, 12, 31),
        date(2024, 1, 2),
        date(2024, 6, 15),
    ]
    assert data.default_total == 17
    assert data.years == []
    assert service.cache.load_default("octocat") is not None


async def test_specific_year_is_fetched_once_then_served_from_cache(
    calendar_html, tmp_path
) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        first = await service.load("octocat", YearSelection.parse("2023"))
        request_count = len(requests)
        second = await service.load("octocat", YearSelection.parse("2023"))

    assert request_count == 2
    assert len(requests) == request_count
    assert first == second
    assert first.available_years == ["2024", "2023"]
    year = first.years[0]
    assert year.year == "2023"
    assert year.total == 40
    assert [c.date for c in year.contributions] == [date(2023, 3, 1), date(2023, 12, 31)]
    assert year.range.start == date(2023, 3, 1)
    assert year.range.end == date(2023, 12, 31)


async def test_refresh_bypasses_cache(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        await service.load("octocat", YearSelection.parse("2023"))
        await service.load("octocat", YearSelection.parse("2023"), refresh=True)

    assert len(requests) == 4


async def test_default_cache_is_refetched_on_a_later_day(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    today = date.today()

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        day = request.url.params["to"]
        return httpx.Response(200, text=calendar_html([(day, 1, 2)]))

    service, client = build_service(handler, tmp_path, today=today)
    async with client:
        await service.load("octocat", YearSelection())
    fetched_first = len(requests)

    service, client = build_service(handler, tmp_path, today=today)
    async with client:
        await service.load("octocat", YearSelection())
    assert len(requests) == fetched_first

    service, client = build_service(handler, tmp_path, today=today + timedelta(days=1))
    async with client:
        await service.load("octocat", YearSelection())
    assert len(requests) > fetched_first


async def test_all_years_are_merged_newest_first(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        data = await service.load("octocat", YearSelection.parse("all"))

    assert [year.year for year in data.years] == ["2024", "2023"]
    assert data.contributions[0].date == date(2024, 6, 15)
    assert data.contributions[-1].date == date(2023, 3, 1)
    assert len({c.date for c in data.contributions}) == len(data.contributions)

    contributions, trailing, total = select_view(data, YearSelection(kind=SelectionKind.ALL))
    assert trailing is False
    assert total == 16 + 40
    assert contributions == data.contributions


async def test_fetch_all_includes_default_window(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        data = await service.fetch_all("octocat")

    assert len(data.years) == 2
    assert data.default_contributions[-1].date == date(2024, 6, 15)


async def test_unknown_year_raises(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    service, client = build_service(github_handler(calendar_html, requests), tmp_path)

    async with client:
        with pytest.raises(YearNotFoundError):
            await service.load("octocat", YearSelection.parse("2010"))


async def test_missing_profile_raises_not_found(tmp_path) -> None:
    service, client = build_service(lambda request: httpx.Response(404), tmp_path)

    async with client:
        with pytest.raises(ProfileNotFoundError):
            await service.load("ghost", YearSelection())


async def test_server_errors_raise_fetch_error(tmp_path) -> None:
    service, client = build_service(lambda request: httpx.Response(503), tmp_path)

    async with client:
        with pytest.raises(GitHubFetchError):
            await service.load("octocat", YearSelection.parse("all"))


async def test_profile_without_years_is_not_found(tmp_path) -> None:
    service, client = build_service(
        lambda request: httpx.Response(200, text="<html></html>"), tmp_path
    )

    async with client:
        with pytest.raises(ProfileNotFoundError):
            await service.load("octocat", YearSelection.parse("all"))


async def test_fragment_without_calendar_falls_back_to_profile_page(
    calendar_html, tmp_path
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/users/octocat/contributions":
            return httpx.Response(200, text="<div>loading</div>")
        return httpx.Response(200, text=calendar_html([("2024-06-15", 2, 4)]))

    service, client = build_service(handler, tmp_path)

    async with client:
        html = await service.fetcher.fetch_calendar_html("octocat", "2024-01-01", "2024-06-15")

    assert [r.url.path for r in requests] == ["/users/octocat/contributions", "/octocat"]
    assert requests[1].url.params["tab"] == "contributions"
    assert requests[1].url.params["from"] == "2024-01-01"
    assert requests[1].headers["x-requested-with"] == "XMLHttpRequest"
    assert "2024-06-15" in html


async def test_browser_html_is_used_when_it_contains_calendar(
    calendar_html, tmp_path
) -> None:
    requests: list[httpx.Request] = []
    browser = FakeBrowser(calendar_html([], year_links=year_links()))

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(500)

    service, client = build_service(handler, tmp_path, browser=browser)

    async with client:
        years = await service.year_ranges("octocat")

    assert [y.year for y in years] == ["2024", "2023"]
    assert browser.urls == ["https://github.test/octocat?tab=contributions"]
    assert requests == []


async def test_empty_browser_result_falls_back_to_http(calendar_html, tmp_path) -> None:
    requests: list[httpx.Request] = []
    browser = FakeBrowser("")

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text=calendar_html([], year_links=year_links()))

    service, client = build_service(handler, tmp_path, browser=browser)

    async with client:
        years = await service.fetch_years("octocat")

    assert len(years) == 2
    assert len(browser.urls) == 1
    assert [r.url.path for r in requests] == ["/octocat"]


class ThreadRecordingCache(ContributionCacheService):
    def __init__(self, cache_dir) -> None:
        super().__init__(cache_dir)
        self.threads: set[int] = set()

    def _load(self, *args, **kwargs):
        self.threads.add(get_ident())
        return super()._load(*args, **kwargs)

    def _save(self, *args, **kwargs):
        self.threads.add(get_ident())
        return super()._save(*args, **kwargs)


async def test_cache_files_are_read_and_written_off_the_event_loop(
    calendar_html, tmp_path
) -> None:
    requests: list[httpx.Request] = []
    handler = github_handler(calendar_html, requests)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    cache = ThreadRecordingCache(tmp_path)
    service = ContributionService(
        fetcher=CalendarPageFetcher(client, base_url="https://github.test"),
        cache=cache,
        today=lambda: TODAY,
    )

    async with client:
        await service.load("octocat", YearSelection.parse("2023"))

    assert cache.threads
    assert get_ident() not in cache.threads
