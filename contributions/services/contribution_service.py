import logging
from collections.abc import Callable
from datetime import date
from datetime import datetime
from datetime import timedelta

from anyio import to_thread

from contributions.clients.github_client import CalendarPageFetcher
from contributions.clients.github_client import ProfileNotFoundError
from contributions.models import Contribution
from contributions.models import ContributionData
from contributions.models import DateRange
from contributions.models import DefaultContributions
from contributions.models import SelectionKind
from contributions.models import YearData
from contributions.models import YearRange
from contributions.models import YearSelection
from contributions.services.cache_service import ContributionCacheService
from contributions.services.calendar_parser import parse_contribution_days
from contributions.services.calendar_parser import parse_heading_total
from contributions.services.calendar_parser import parse_year_ranges


logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 370


class YearNotFoundError(Exception):
    """Raised when a requested year is not offered on the profile."""


def build_year_data(year: str, html: str, from_date: date, to_date: date) -> YearData:
    """Convert one year's calendar markup into `YearData` bounded by its range."""

    contributions = parse_contribution_days(html, from_date, to_date)
    date_range = None
    if contributions:
        days = [contribution.date for contribution in contributions]
        date_range = DateRange(start=min(days), end=max(days))

    total = parse_heading_total(html)
    if total is None:
        total = sum(contribution.count for contribution in contributions)

    return YearData(
        year=year, total=total, range=date_range, contributions=contributions
    )


def merge_years(years: list[YearData]) -> list[Contribution]:
    merged: dict[date, Contribution] = {}
    for year_data in years:
        for contribution in year_data.contributions:
            merged[contribution.date] = contribution
    return sorted(merged.values(), key=lambda item: item.date, reverse=True)


def select_view(
    data: ContributionData, selection: YearSelection
) -> tuple[list[Contribution], bool, int]:
    """Pick the contributions to draw for a selection.

    Returns the contributions, whether the trailing 53-week window applies, and
    the total to print.
    """

    if selection.kind == SelectionKind.DEFAULT:
        return data.default_contributions, True, data.default_total

    if selection.kind == SelectionKind.YEAR:
        for year_data in data.years:
            if year_data.year == selection.year:
                return year_data.contributions, False, year_data.total
        raise YearNotFoundError(selection.year)

    return data.contributions, False, sum(year_data.total for year_data in data.years)


class ContributionService:
    """Fetches, caches and aggregates contribution calendars for a user."""

    def __init__(
        self,
        fetcher: CalendarPageFetcher,
        cache: ContributionCacheService,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.today = today

    async def fetch_years(self, username: str) -> list[YearRange]:
        html = await self.fetcher.fetch_profile_page(username)
        return parse_year_ranges(html)

    async def fetch_year_data(self, username: str, year_range: YearRange) -> YearData:
        from_date = date.fromisoformat(year_range.from_date)
        to_date = date.fromisoformat(year_range.to_date)
        html = await self.fetcher.fetch_calendar_html(
            username, year_range.from_date, year_range.to_date
        )
        return build_year_data(year_range.year, html, from_date, to_date)

    async def fetch_default_contributions(self, username: str) -> DefaultContributions:
        """Fetch the rolling window ending today, one calendar year at a time."""

        to_date = self.today()
        from_date = to_date - timedelta(days=DEFAULT_WINDOW_DAYS)

        contributions: list[Contribution] = []
        seen: set[date] = set()
        for year in range(from_date.year, to_date.year + 1):
            range_from = from_date if year == from_date.year else date(year, 1, 1)
            range_to = to_date if year == to_date.year else date(year, 12, 31)
            html = await self.fetcher.fetch_calendar_html(
                username, range_from.isoformat(), range_to.isoformat()
            )
            for contribution in parse_contribution_days(html, from_date, to_date):
                if contribution.date in seen:
                    continue
                seen.add(contribution.date)
                contributions.append(contribution)

        contributions.sort(key=lambda item: item.date)
        return DefaultContributions(
            total=sum(contribution.count for contribution in contributions),
            contributions=contributions,
        )

    async def fetch_all(self, username: str) -> ContributionData:
        """Fetch every year plus the default window, bypassing the cache."""

        return await self.load(
            username, YearSelection(kind=SelectionKind.ALL), refresh=True, with_default=True
        )

    async def load(
        self,
        username: str,
        selection: YearSelection,
        refresh: bool = False,
        with_default: bool = False,
    ) -> ContributionData:
        """Load the data needed to show `selection`, fetching only what is missing.

        Raises:
            ProfileNotFoundError: If the profile yields no contribution data.
            YearNotFoundError: If a specific year is not offered on the profile.
            GitHubFetchError: If GitHub cannot be reached.
        """

        data = ContributionData()

        if selection.kind == SelectionKind.DEFAULT or with_default:
            default = await self._default(username, refresh)
            data.default_contributions = default.contributions
            data.default_total = default.total

        if selection.kind == SelectionKind.DEFAULT:
            cached_years = await to_thread.run_sync(self.cache.load_years, username)
            if cached_years is not None:
                data.available_years = [item.year for item in cached_years.data]
            if not data.default_contributions:
                raise ProfileNotFoundError(username)
            return data

        year_ranges = await self.year_ranges(username, refresh)
        data.available_years = [item.year for item in year_ranges]

        if selection.kind == SelectionKind.YEAR:
            wanted = [item for item in year_ranges if item.year == selection.year]
            if not wanted:
                if not year_ranges:
                    raise ProfileNotFoundError(username)
                raise YearNotFoundError(selection.year)
        else:
            wanted = year_ranges
            if not wanted:
                raise ProfileNotFoundError(username)

        for year_range in wanted:
            data.years.append(await self._year_data(username, year_range, refresh))

        data.contributions = merge_years(data.years)
        return data

    async def _default(self, username: str, refresh: bool) -> DefaultContributions:
        cached = None
        if not refresh:
            cached = await to_thread.run_sync(self.cache.load_default, username)
        if cached is not None and self._is_fresh(cached.saved_at):
            return cached.data

        logger.info("Fetching default contributions for %s", username)
        default = await self.fetch_default_contributions(username)
        if default.contributions:
            await to_thread.run_sync(self.cache.save_default, username, default)
        return default

    async def year_ranges(self, username: str, refresh: bool = False) -> list[YearRange]:
        cached = None
        if not refresh:
            cached = await to_thread.run_sync(self.cache.load_years, username)
        if cached is not None and self._is_fresh(cached.saved_at):
            return cached.data

        logger.info("Fetching year list for %s", username)
        year_ranges = await self.fetch_years(username)
        if year_ranges:
            await to_thread.run_sync(self.cache.save_years, username, year_ranges)
        return year_ranges

    async def _year_data(self, username: str, year_range: YearRange, refresh: bool) -> YearData:
        cached = None
        if not refresh:
            cached = await to_thread.run_sync(
                self.cache.load_year_data, username, year_range.year
            )
        if cached is not None:
            is_current_year = year_range.year == str(self.today().year)
            if not is_current_year or self._is_fresh(cached.saved_at):
                return cached.data

        logger.info("Fetching %s contributions for %s", year_range.year, username)
        year_data = await self.fetch_year_data(username, year_range)
        await to_thread.run_sync(self.cache.save_year_data, username, year_data)
        return year_data

    def _is_fresh(self, saved_at: datetime) -> bool:
        return saved_at.astimezone().date() >= self.today()
