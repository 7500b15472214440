import logging
import re
from datetime import UTC
from datetime import datetime
from pathlib import Path
from typing import Any
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ValidationError

from contributions.models import DefaultContributions
from contributions.models import YearData
from contributions.models import YearRange


logger = logging.getLogger(__name__)

CACHE_VERSION = 1
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

T = TypeVar("T")


class CacheEnvelope(BaseModel, Generic[T]):
    version: int
    saved_at: datetime
    data: T


class CacheVersionProbe(BaseModel):
    version: int


def sanitize_username(username: str) -> str:
    """Turn a username into a safe directory name."""

    if not username or not username.strip():
        return "unknown"
    return INVALID_FILENAME_CHARS.sub("_", username).strip().lower() or "unknown"


class ContributionCacheService:
    """Per-user JSON cache of fetched contribution data.

    Entries written with a different `CACHE_VERSION` are treated as missing.
    """

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir = Path(cache_dir)

    def user_dir(self, username: str) -> Path:
        return self.cache_dir / sanitize_username(username)

    def default_path(self, username: str) -> Path:
        return self.user_dir(username) / "default.json"

    def years_path(self, username: str) -> Path:
        return self.user_dir(username) / "years.json"

    def year_path(self, username: str, year: str) -> Path:
        return self.user_dir(username) / f"year-{year}.json"

    def load_default(self, username: str) -> CacheEnvelope[DefaultContributions] | None:
        return self._load(self.default_path(username), DefaultContributions)

    def save_default(self, username: str, data: DefaultContributions) -> None:
        self._save(self.default_path(username), data)

    def load_years(self, username: str) -> CacheEnvelope[list[YearRange]] | None:
        return self._load(self.years_path(username), list[YearRange])

    def save_years(self, username: str, years: list[YearRange]) -> None:
        self._save(self.years_path(username), years)

    def load_year_data(self, username: str, year: str) -> CacheEnvelope[YearData] | None:
        return self._load(self.year_path(username, year), YearData)

    def save_year_data(self, username: str, data: YearData) -> None:
        self._save(self.year_path(username, data.year), data)

    def _load(self, path: Path, data_type: Any) -> CacheEnvelope | None:
        if not path.exists():
            return None

        try:
            raw = path.read_text(encoding="utf-8")
            probe = CacheVersionProbe.model_validate_json(raw)
            if probe.version != CACHE_VERSION:
                logger.info("Discarding cache %s with version %s", path, probe.version)
                return None
            return CacheEnvelope[data_type].model_validate_json(raw)
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return None

    def _save(self, path: Path, data: BaseModel | list) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        envelope = CacheEnvelope(
            version=CACHE_VERSION, saved_at=datetime.now(UTC), data=data
        )
        path.write_text(envelope.model_dump_json(indent=2), encoding="utf-8")
