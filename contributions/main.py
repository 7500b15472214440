from fastapi import FastAPI

from contributions.api.routes.heatmap import router
from contributions.core.middleware import ScrapeRateLimitMiddleware
from contributions.core.observability import configure_logging
from contributions.core.observability import init_sentry
from contributions.settings import Settings


SCRAPING_PATHS = (
    "/contributions",
    "/contributions/years",
    "/heatmap/layout",
    "/heatmap.png",
)


def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings)
    init_sentry(settings)

    app = FastAPI(title="GitHub Contributions")
    app.add_middleware(
        ScrapeRateLimitMiddleware,
        limited_paths=SCRAPING_PATHS,
        requests_per_window=settings.rate_limit_per_minute,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.include_router(router)
    return app


app = create_app()
