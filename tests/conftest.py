from collections.abc import Callable

import pytest


CALENDAR_TEMPLATE = """
<div class="js-yearly-contributions">
  <h2 id="js-contribution-activity-description" class="f4 text-normal mb-2">{heading}</h2>
  <table class="ContributionCalendar-grid js-calendar-graph-table" role="grid">
    <tbody>
      <tr>{cells}</tr>
    </tbody>
  </table>
  {tooltips}
</div>
"""

YEAR_LIST_TEMPLATE = """
<div class="js-profile-timeline-year-list">
  <ul class="filter-list small">{links}</ul>
</div>
"""


def describe(count: int, day: str) -> str:
    if count == 0:
        return f"No contributions on {day}."
    noun = "contribution" if count == 1 else "contributions"
    return f"{count} {noun} on {day}."


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def calendar_html() -> Callable[..., str]:
    """Build contribution calendar markup the way github.com renders it."""

    def build(
        days: list[tuple[str, int, int]],
        heading: str = "",
        year_links: list[tuple[str, str]] | None = None,
    ) -> str:
        cells = []
        tooltips = []
        for index, (day, level, count) in enumerate(days):
            cell_id = f"contribution-day-component-{index % 7}-{index // 7}"
            cells.append(
                f'<td tabindex="0" data-ix="{index // 7}" data-date="{day}" '
                f'id="{cell_id}" data-level="{level}" role="gridcell" '
                f'class="ContributionCalendar-day"></td>'
            )
            tooltips.append(
                f'<tool-tip id="tooltip-{index}" for="{cell_id}" popover="manual" '
                f'class="sr-only position-absolute">{describe(count, day)}</tool-tip>'
            )

        html = CALENDAR_TEMPLATE.format(
            heading=heading, cells="".join(cells), tooltips="".join(tooltips)
        )
        if year_links:
            links = "".join(
                f'<li><a id="year-link-{year}" class="js-year-link filter-item" '
                f'href="{href}">{year}</a></li>'
                for year, href in year_links
            )
            html += YEAR_LIST_TEMPLATE.format(links=links)
        return html

    return build
