import json

from contributions.models import SelectionKind
from contributions.models import UserSettings
from contributions.models import YearSelection
from contributions.services.settings_service import SettingsService


def test_load_returns_defaults_when_file_missing(tmp_path) -> None:
    service = SettingsService(tmp_path / "settings.json")

    settings = service.load()

    assert settings == UserSettings()
    assert settings.theme_mode == "Dark"
    assert settings.palette_name == "standard"


def test_save_then_load_round_trip(tmp_path) -> None:
    service = SettingsService(tmp_path / "nested" / "settings.json")
    settings = UserSettings(
        url="https://github.com/octocat",
        theme_mode="Light",
        palette_name="dracula",
        language="ja-JP",
    ).with_selection(YearSelection.parse("2023"))

    service.save(settings)

    assert service.load() == settings


def test_unknown_keys_are_ignored_and_corrupt_files_fall_back(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"url": "octocat", "auto_copy_to_clipboard": True}), encoding="utf-8"
    )
    service = SettingsService(path)

    assert service.load().url == "octocat"

    path.write_text("[]", encoding="utf-8")

    assert service.load() == UserSettings()


def test_update_persists_changes(tmp_path) -> None:
    service = SettingsService(tmp_path / "settings.json")

    service.update(url="octocat", selected_year_kind="all")

    reloaded = service.load()
    assert reloaded.url == "octocat"
    assert reloaded.selection().kind == SelectionKind.ALL


def test_invalid_stored_selection_falls_back_to_default() -> None:
    settings = UserSettings(selected_year_kind="year", selected_year_value="last")

    assert settings.selection() == YearSelection()
