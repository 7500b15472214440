from datetime import date
from datetime import timedelta

from pydantic import BaseModel
from pydantic import Field

from contributions.models import Contribution


TRAILING_WEEKS = 53
DAYS_PER_WEEK = 7
MAX_INTENSITY = 4


class CalendarCell(BaseModel):
    """Single painted square positioned by week column and weekday row."""

    week: int
    weekday: int
    date: date
    level: int


class MonthLabel(BaseModel):
    week: int
    year: int
    month: int


class CalendarLayout(BaseModel):
    """Grid placement of a contribution calendar, Sunday rows first."""

    start: date | None = None
    range_start: date | None = None
    range_end: date | None = None
    weeks: int = 0
    cells: list[CalendarCell] = Field(default_factory=list)
    month_labels: list[MonthLabel] = Field(default_factory=list)


def week_start(day: date) -> date:
    """Return the Sunday on or before `day`."""

    weekday = (day.weekday() + 1) % 7
    return day - timedelta(days=weekday)


def clamp_intensity(intensity: int) -> int:
    return max(0, min(MAX_INTENSITY, intensity))


def compute_layout(
    contributions: list[Contribution],
    trailing_window: bool,
    today: date | None = None,
) -> CalendarLayout:
    """Place contributions on a 7-row week grid.

    With `trailing_window` the grid is the 53 weeks ending with the latest
    contribution; otherwise it spans from the first to the last contribution.
    """

    if not contributions:
        return CalendarLayout()

    by_date = {contribution.date: contribution for contribution in contributions}
    first_day = min(by_date)
    last_day = max(by_date)

    if trailing_window and today is not None and (today - last_day).days == 1:
        # The calendar often lags a day behind local time.
        last_day = today

    end_week = week_start(last_day)
    if trailing_window:
        weeks = TRAILING_WEEKS
        start = end_week - timedelta(weeks=TRAILING_WEEKS - 1)
        range_start = start
    else:
        start = week_start(first_day)
        weeks = (end_week - start).days // DAYS_PER_WEEK + 1
        range_start = first_day

    cells: list[CalendarCell] = []
    month_labels: list[MonthLabel] = []
    for week in range(weeks):
        labelled = False
        for weekday in range(DAYS_PER_WEEK):
            day = start + timedelta(days=week * DAYS_PER_WEEK + weekday)
            in_range = range_start <= day <= last_day

            if not labelled and in_range and day.day == 1:
                month_labels.append(MonthLabel(week=week, year=day.year, month=day.month))
                labelled = True

            contribution = by_date.get(day)
            if contribution is not None:
                level = clamp_intensity(contribution.intensity)
            elif in_range:
                level = 0
            else:
                continue
            cells.append(CalendarCell(week=week, weekday=weekday, date=day, level=level))

    return CalendarLayout(
        start=start,
        range_start=range_start,
        range_end=last_day,
        weeks=weeks,
        cells=cells,
        month_labels=month_labels,
    )
