from datetime import date
from functools import partial
from typing import Any
from typing import Literal

from anyio import to_thread
from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import HTTPException
from fastapi import Query
from fastapi.responses import RedirectResponse
from fastapi.responses import Response
from pydantic import ValidationError

from contributions.api.dependencies import get_contribution_service
from contributions.api.dependencies import get_settings
from contributions.api.dependencies import get_settings_service
from contributions.api.schemas.heatmap import ContributionsResponse
from contributions.api.schemas.heatmap import LayoutResponse
from contributions.api.schemas.heatmap import YearsResponse
from contributions.clients.github_client import GitHubFetchError
from contributions.clients.github_client import ProfileNotFoundError
from contributions.i18n import LANGUAGE_CODES
from contributions.i18n import LANGUAGES
from contributions.i18n import Language
from contributions.i18n import format_string
from contributions.i18n import get_string
from contributions.models import ContributionData
from contributions.models import SelectionKind
from contributions.models import UserSettings
from contributions.models import YearSelection
from contributions.services.calendar_layout import CalendarLayout
from contributions.services.calendar_layout import compute_layout
from contributions.services.calendar_parser import clean_username
from contributions.services.contribution_service import ContributionService
from contributions.services.contribution_service import YearNotFoundError
from contributions.services.contribution_service import select_view
from contributions.services.heatmap_renderer import render_heatmap
from contributions.services.heatmap_renderer import to_png_bytes
from contributions.services.palettes import PALETTE_NAMES
from contributions.services.palettes import PALETTES
from contributions.services.palettes import Palette
from contributions.services.palettes import get_palette
from contributions.services.palettes import get_theme
from contributions.services.settings_service import SettingsService
from contributions.services.share import share_link
from contributions.settings import Settings


router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service greeting."""

    return {"message": "GitHub contributions heat-map"}


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/settings")
def read_settings(
    settings_service: SettingsService = Depends(get_settings_service),
) -> UserSettings:
    """Return the persisted user preferences."""

    return settings_service.load()


@router.put("/settings")
def update_settings(
    body: dict[str, Any] = Body(...),
    settings_service: SettingsService = Depends(get_settings_service),
) -> UserSettings:
    """Validate and persist user preferences."""

    try:
        payload = UserSettings.model_validate(body)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error["loc"]})
        raise HTTPException(
            status_code=400, detail=f"invalid settings: {', '.join(fields)}"
        ) from exc
    if payload.palette_name not in PALETTE_NAMES:
        raise HTTPException(status_code=400, detail="unknown palette")
    if payload.language not in LANGUAGE_CODES:
        raise HTTPException(status_code=400, detail="unsupported language")
    try:
        YearSelection.from_settings(payload.selected_year_kind, payload.selected_year_value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="invalid year selection") from exc

    settings_service.save(payload)
    return payload


@router.get("/palettes")
def list_palettes() -> list[Palette]:
    return PALETTES


@router.get("/languages")
def list_languages() -> list[Language]:
    return LANGUAGES


async def resolve_request(
    settings_service: SettingsService,
    url: str | None,
    selection: str | None,
) -> tuple[str, YearSelection, UserSettings]:
    """Work out the username and view, falling back to the stored choices."""

    user_settings = await to_thread.run_sync(settings_service.load)
    language = user_settings.language

    username = clean_username(url if url is not None else user_settings.url)
    if not username:
        raise HTTPException(
            status_code=400, detail=get_string("ErrorInvalidUsername", language)
        )

    if selection is None:
        year_selection = user_settings.selection()
    else:
        try:
            year_selection = YearSelection.parse(selection)
        except ValueError as exc:
            raise HTTPException(
                status_code=400, detail=get_string("ErrorInvalidSelection", language)
            ) from exc

    return username, year_selection, user_settings


async def remember_request(
    settings_service: SettingsService,
    user_settings: UserSettings,
    url: str | None,
    selection: YearSelection | None,
) -> UserSettings:
    """Persist an explicit url or selection once it has loaded successfully."""

    changes: dict[str, str] = {}
    if url is not None and url != user_settings.url:
        changes["url"] = url
    if selection is not None and selection != user_settings.selection():
        changes["selected_year_kind"] = selection.kind.value
        changes["selected_year_value"] = selection.year or ""
    if not changes:
        return user_settings
    return await to_thread.run_sync(partial(settings_service.update, **changes))


async def load_contributions(
    service: ContributionService,
    username: str,
    selection: YearSelection,
    refresh: bool,
    language: str,
) -> ContributionData:
    try:
        return await service.load(username, selection, refresh=refresh)
    except ProfileNotFoundError as exc:
        raise HTTPException(
            status_code=404, detail=get_string("ErrorProfileNotFound", language)
        ) from exc
    except YearNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=format_string("ErrorYearNotFound", language, year=selection.year),
        ) from exc
    except GitHubFetchError as exc:
        raise HTTPException(
            status_code=502, detail=get_string("ErrorFetchFailed", language)
        ) from exc


def total_label(selection: YearSelection, total: int, language: str) -> str:
    if selection.kind == SelectionKind.DEFAULT:
        return format_string("TotalLastYear", language, total=total)
    if selection.kind == SelectionKind.YEAR:
        return format_string("TotalInYear", language, total=total, year=selection.year)
    return format_string("TotalAllYears", language, total=total)


async def build_layout(
    service: ContributionService,
    settings_service: SettingsService,
    url: str | None,
    selection: str | None,
    refresh: bool,
) -> tuple[str, YearSelection, UserSettings, CalendarLayout, int]:
    username, year_selection, user_settings = await resolve_request(
        settings_service, url, selection
    )
    data = await load_contributions(
        service, username, year_selection, refresh, user_settings.language
    )
    user_settings = await remember_request(
        settings_service, user_settings, url, year_selection if selection is not None else None
    )
    contributions, trailing_window, total = select_view(data, year_selection)
    layout = compute_layout(contributions, trailing_window, today=date.today())
    return username, year_selection, user_settings, layout, total


@router.get("/contributions")
async def get_contributions(
    url: str | None = Query(default=None),
    selection: str | None = Query(default=None),
    refresh: bool = Query(default=False),
    service: ContributionService = Depends(get_contribution_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> ContributionsResponse:
    """Return scraped contribution data for the requested view."""

    username, year_selection, user_settings = await resolve_request(
        settings_service, url, selection
    )
    data = await load_contributions(
        service, username, year_selection, refresh, user_settings.language
    )
    await remember_request(
        settings_service, user_settings, url, year_selection if selection is not None else None
    )
    _, _, total = select_view(data, year_selection)
    return ContributionsResponse(
        username=username, selection=str(year_selection), total=total, data=data
    )


@router.get("/contributions/years")
async def get_years(
    url: str | None = Query(default=None),
    refresh: bool = Query(default=False),
    service: ContributionService = Depends(get_contribution_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> YearsResponse:
    """Return the years offered on the profile's contribution calendar."""

    username, _, user_settings = await resolve_request(settings_service, url, None)
    try:
        years = await service.year_ranges(username, refresh)
    except ProfileNotFoundError as exc:
        raise HTTPException(
            status_code=404,
            detail=get_string("ErrorProfileNotFound", user_settings.language),
        ) from exc
    except GitHubFetchError as exc:
        raise HTTPException(
            status_code=502, detail=get_string("ErrorFetchFailed", user_settings.language)
        ) from exc
    await remember_request(settings_service, user_settings, url, None)
    return YearsResponse(username=username, years=years)


@router.get("/heatmap/layout")
async def get_heatmap_layout(
    url: str | None = Query(default=None),
    selection: str | None = Query(default=None),
    refresh: bool = Query(default=False),
    service: ContributionService = Depends(get_contribution_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> LayoutResponse:
    """Return the calendar grid placement without drawing it."""

    username, year_selection, _, layout, total = await build_layout(
        service, settings_service, url, selection, refresh
    )
    return LayoutResponse(
        username=username, selection=str(year_selection), total=total, layout=layout
    )


@router.get("/heatmap.png")
async def get_heatmap_image(
    url: str | None = Query(default=None),
    selection: str | None = Query(default=None),
    refresh: bool = Query(default=False),
    theme: Literal["Light", "Dark"] | None = Query(default=None),
    palette: str | None = Query(default=None),
    language: str | None = Query(default=None),
    show_total: bool = Query(default=True),
    download: bool = Query(default=False),
    service: ContributionService = Depends(get_contribution_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> Response:
    """Render the contribution heat-map as a PNG image."""

    username, year_selection, user_settings, layout, total = await build_layout(
        service, settings_service, url, selection, refresh
    )
    culture = language if language is not None else user_settings.language

    image = render_heatmap(
        layout,
        theme=get_theme(theme or user_settings.theme_mode),
        palette=get_palette(palette or user_settings.palette_name),
        title=get_string("ChartTitle", culture),
        total_label=total_label(year_selection, total, culture) if show_total else None,
        legend_less=get_string("LegendLess", culture),
        legend_more=get_string("LegendMore", culture),
    )

    headers = {}
    if download:
        headers["Content-Disposition"] = (
            f'attachment; filename="{username}-{year_selection}.png"'
        )
    return Response(content=to_png_bytes(image), media_type="image/png", headers=headers)


@router.get("/share")
def share_to_x(
    url: str | None = Query(default=None),
    settings: Settings = Depends(get_settings),
    settings_service: SettingsService = Depends(get_settings_service),
) -> RedirectResponse:
    """Redirect to the X (Twitter) composer prefilled from the share settings."""

    user_settings = settings_service.load()
    username = clean_username(url if url is not None else user_settings.url)
    return RedirectResponse(
        share_link(user_settings, username, settings.github_base_url), status_code=307
    )
