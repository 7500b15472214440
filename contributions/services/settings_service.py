import logging
from pathlib import Path

from pydantic import ValidationError

from contributions.models import UserSettings


logger = logging.getLogger(__name__)


class SettingsService:
    """Reads and writes the user's preferences file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> UserSettings:
        """Load saved preferences, falling back to defaults when absent or broken."""

        if not self.path.exists():
            return UserSettings()

        try:
            return UserSettings.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return UserSettings()

    def save(self, settings: UserSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")

    def update(self, **changes: object) -> UserSettings:
        settings = self.load().model_copy(update=changes)
        self.save(settings)
        return settings
