from pydantic import BaseModel

from contributions.models import ContributionData
from contributions.models import YearRange
from contributions.services.calendar_layout import CalendarLayout


class ContributionsResponse(BaseModel):
    """Contribution data loaded for the requested view."""

    username: str
    selection: str
    total: int
    data: ContributionData


class YearsResponse(BaseModel):
    """Years offered on the user's contribution calendar."""

    username: str
    years: list[YearRange]


class LayoutResponse(BaseModel):
    """Computed calendar grid for the requested view."""

    username: str
    selection: str
    total: int
    layout: CalendarLayout
