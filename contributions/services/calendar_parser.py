import re
from datetime import date
from urllib.parse import parse_qs
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from bs4 import Tag

from contributions.models import Contribution
from contributions.models import YearRange


CALENDAR_TABLE_SELECTOR = "table.ContributionCalendar-grid.js-calendar-graph-table"
DAY_CELL_SELECTOR = "td.ContributionCalendar-day"
YEAR_LINK_SELECTOR = "ul.filter-list.small a[id^='year-link-']"
LEGACY_YEAR_LINK_SELECTOR = "a.js-year-link.filter-item"

GITHUB_PATH_PATTERN = re.compile(r"github\.com/([^/?]+)")
GITHUB_PREFIX_PATTERN = re.compile(r"^(http|https)://(?!www\.)github\.com/")
YEAR_TEXT_PATTERN = re.compile(r"\d{4}")
COUNT_PATTERN = re.compile(r"^\s*(No|[\d,]+)\s+contributions?\b", re.IGNORECASE)
HEADING_TOTAL_PATTERN = re.compile(r"([\d,]+)\s+contributions?\b", re.IGNORECASE)


def clean_username(value: str | None) -> str:
    """Extract a GitHub username from a profile URL or a bare username."""

    if not value or not value.strip():
        return ""

    match = GITHUB_PATH_PATTERN.search(value)
    if match:
        return match.group(1)

    return GITHUB_PREFIX_PATTERN.sub("", value).strip()


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def has_calendar_table(html: str) -> bool:
    return parse_html(html).select_one(CALENDAR_TABLE_SELECTOR) is not None


def find_day_cells(soup: BeautifulSoup) -> list[Tag]:
    table = soup.select_one(CALENDAR_TABLE_SELECTOR)
    if table is None:
        return []
    return table.select(DAY_CELL_SELECTOR)


def attribute_from_self_or_descendant(node: Tag, name: str) -> str:
    direct = node.get(name)
    if isinstance(direct, str) and direct.strip():
        return direct.strip()

    child = node.find(attrs={name: True})
    if isinstance(child, Tag):
        value = child.get(name)
        if isinstance(value, str):
            return value.strip()
    return ""


class TooltipLookup:
    """Tooltip texts indexed by tooltip id and by the element they describe."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self.by_id: dict[str, str] = {}
        self.by_target: dict[str, str] = {}

        for tooltip in soup.find_all("tool-tip"):
            text = tooltip.get_text(" ", strip=True)
            if not text:
                continue
            tooltip_id = tooltip.get("id")
            if isinstance(tooltip_id, str) and tooltip_id:
                self.by_id[tooltip_id] = text
            target = tooltip.get("for")
            if isinstance(target, str) and target:
                self.by_target[target] = text

    def resolve(self, cell: Tag, day: str) -> str:
        """Return the human readable tooltip for a day cell.

        Checked in order: `aria-label`, `aria-labelledby` ids, a tooltip
        pointing at the cell id, a tooltip keyed by date, then the cell text.
        """

        label = cell.get("aria-label")
        if isinstance(label, str) and label.strip():
            return label.strip()

        labelled_by = cell.get("aria-labelledby")
        if isinstance(labelled_by, list):
            labelled_by = " ".join(labelled_by)
        if isinstance(labelled_by, str) and labelled_by.strip():
            texts = [
                self.by_id[ref] for ref in labelled_by.split() if ref in self.by_id
            ]
            if texts:
                return " ".join(texts)

        cell_id = cell.get("id")
        if isinstance(cell_id, str) and cell_id in self.by_target:
            return self.by_target[cell_id]
        if day in self.by_target:
            return self.by_target[day]

        return cell.get_text(" ", strip=True)


def parse_count(tooltip_text: str) -> int:
    """Read the contribution count from tooltip text such as `3 contributions on ...`."""

    match = COUNT_PATTERN.match(tooltip_text or "")
    if not match:
        return 0
    raw = match.group(1)
    if raw.lower() == "no":
        return 0
    return int(raw.replace(",", ""))


def parse_contribution_days(
    html: str,
    from_date: date | None = None,
    to_date: date | None = None,
) -> list[Contribution]:
    """Extract contribution days from calendar markup, optionally bounded by dates."""

    soup = parse_html(html)
    tooltips = TooltipLookup(soup)
    contributions: list[Contribution] = []

    for cell in find_day_cells(soup):
        raw_date = attribute_from_self_or_descendant(cell, "data-date")
        if not raw_date:
            continue
        try:
            parsed_date = date.fromisoformat(raw_date)
        except ValueError:
            continue
        if from_date is not None and parsed_date < from_date:
            continue
        if to_date is not None and parsed_date > to_date:
            continue

        raw_level = attribute_from_self_or_descendant(cell, "data-level")
        try:
            intensity = int(raw_level)
        except ValueError:
            intensity = 0

        tooltip_text = tooltips.resolve(cell, raw_date)
        contributions.append(
            Contribution(
                date=parsed_date,
                count=parse_count(tooltip_text),
                intensity=intensity,
                tooltip_text=tooltip_text,
            )
        )

    return contributions


def parse_heading_total(html: str) -> int | None:
    """Return the `N contributions in ...` figure from the calendar heading."""

    soup = parse_html(html)
    heading = soup.select_one("#js-contribution-activity-description")
    candidates = [heading] if heading is not None else soup.find_all("h2")
    for candidate in candidates:
        match = HEADING_TOTAL_PATTERN.search(candidate.get_text(" ", strip=True))
        if match:
            return int(match.group(1).replace(",", ""))
    return None


def normalize_year_text(value: str) -> str:
    match = YEAR_TEXT_PATTERN.search(value or "")
    if match:
        return match.group(0)
    return (value or "").strip()


def query_value(url: str, key: str) -> str | None:
    query = urlsplit(url or "").query
    if not query:
        return None
    lowered = {name.lower(): values for name, values in parse_qs(query).items()}
    values = lowered.get(key.lower())
    return values[0] if values else None


def parse_year_ranges(html: str) -> list[YearRange]:
    """Discover the selectable years listed beside the contribution calendar."""

    soup = parse_html(html)
    links = soup.select(YEAR_LINK_SELECTOR) or soup.select(LEGACY_YEAR_LINK_SELECTOR)

    years: list[YearRange] = []
    for link in links:
        year = normalize_year_text(link.get_text(" ", strip=True))
        if not year:
            continue
        href = link.get("href")
        href = href if isinstance(href, str) else ""
        years.append(
            YearRange(
                year=year,
                from_date=query_value(href, "from") or f"{year}-01-01",
                to_date=query_value(href, "to") or f"{year}-12-31",
            )
        )
    return years
