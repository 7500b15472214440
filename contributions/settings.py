from pathlib import Path

from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    github_base_url: str = "https://github.com"
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout_seconds: float = 20.0
    browser_enabled: bool = True
    browser_timeout_seconds: float = 20.0
    browser_poll_interval_seconds: float = 0.4
    data_dir: Path = Path.home() / ".contributions"
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cache_dir(self) -> Path:
        return self.data_dir / "cache"

    @property
    def user_settings_path(self) -> Path:
        return self.data_dir / "settings.json"
