import re
from datetime import date
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


YEAR_PATTERN = re.compile(r"^\d{4}$")


class Contribution(BaseModel):
    """One calendar day scraped from the contribution graph."""

    model_config = ConfigDict(frozen=True)

    date: date
    count: int = 0
    intensity: int = 0
    tooltip_text: str = ""


class DateRange(BaseModel):
    start: date
    end: date


class YearRange(BaseModel):
    """Year label and the from/to bounds GitHub uses to scope that year."""

    year: str
    from_date: str
    to_date: str


class YearData(BaseModel):
    year: str
    total: int = 0
    range: DateRange | None = None
    contributions: list[Contribution] = Field(default_factory=list)


class DefaultContributions(BaseModel):
    """Rolling trailing-year window shown when no year is selected."""

    total: int = 0
    contributions: list[Contribution] = Field(default_factory=list)


class ContributionData(BaseModel):
    years: list[YearData] = Field(default_factory=list)
    contributions: list[Contribution] = Field(default_factory=list)
    default_contributions: list[Contribution] = Field(default_factory=list)
    default_total: int = 0
    available_years: list[str] = Field(default_factory=list)


class SelectionKind(StrEnum):
    DEFAULT = "default"
    ALL = "all"
    YEAR = "year"


class YearSelection(BaseModel):
    """Which subset of the contribution history is being viewed."""

    model_config = ConfigDict(frozen=True)

    kind: SelectionKind = SelectionKind.DEFAULT
    year: str | None = None

    @classmethod
    def parse(cls, value: str | None) -> "YearSelection":
        """Build a selection from `default`, `all` or a four digit year.

        Raises:
            ValueError: If the value is none of those.
        """

        normalized = (value or "").strip().lower()
        if normalized in {"", SelectionKind.DEFAULT}:
            return cls()
        if normalized == SelectionKind.ALL:
            return cls(kind=SelectionKind.ALL)
        if YEAR_PATTERN.match(normalized):
            return cls(kind=SelectionKind.YEAR, year=normalized)
        raise ValueError(f"invalid year selection: {value!r}")

    @classmethod
    def from_settings(cls, kind: str, value: str) -> "YearSelection":
        if kind == SelectionKind.YEAR:
            return cls.parse(value)
        return cls.parse(kind)

    def __str__(self) -> str:
        if self.kind == SelectionKind.YEAR and self.year:
            return self.year
        return self.kind.value


class UserSettings(BaseModel):
    """Preferences persisted between runs."""

    model_config = ConfigDict(extra="ignore")

    url: str = ""
    theme_mode: Literal["Light", "Dark"] = "Dark"
    palette_name: str = "standard"
    language: str = ""
    selected_year_kind: str = ""
    selected_year_value: str = ""
    share_text: str = "My GitHub contributions this year 🚀"
    share_url_option: Literal["", "profile", "custom", "none"] = ""
    share_url: str = ""
    share_hashtag1: str = "GitHub"
    share_hashtag2: str = ""
    share_hashtag3: str = ""

    def selection(self) -> YearSelection:
        try:
            return YearSelection.from_settings(
                self.selected_year_kind, self.selected_year_value
            )
        except ValueError:
            return YearSelection()

    def with_selection(self, selection: YearSelection) -> "UserSettings":
        return self.model_copy(
            update={
                "selected_year_kind": selection.kind.value,
                "selected_year_value": selection.year or "",
            }
        )
