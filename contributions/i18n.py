"""Translated UI strings with culture fallback.

Lookup walks the culture chain (`ja-JP` -> `ja`), then the neutral English
table, then `en-US`, and finally returns the key itself.
"""

from pydantic import BaseModel


NEUTRAL = ""
FALLBACK_CULTURES = ("en-US",)


class Language(BaseModel):
    code: str
    display_name: str


LANGUAGES: list[Language] = [
    Language(code="", display_name="System (default)"),
    Language(code="en-US", display_name="English"),
    Language(code="ja-JP", display_name="Japanese"),
    Language(code="de-DE", display_name="German"),
    Language(code="es-ES", display_name="Spanish"),
    Language(code="fr-FR", display_name="French"),
    Language(code="hi-IN", display_name="Hindi"),
    Language(code="ko-KR", display_name="Korean"),
    Language(code="zh-Hans", display_name="Chinese (Simplified)"),
]

LANGUAGE_CODES = {language.code for language in LANGUAGES}

TRANSLATIONS: dict[str, dict[str, str]] = {
    NEUTRAL: {
        "ChartTitle": "GitHub Contributions",
        "LegendLess": "Less",
        "LegendMore": "More",
        "TotalLastYear": "{total} contributions in the last year",
        "TotalInYear": "{total} contributions in {year}",
        "TotalAllYears": "{total} contributions in all years",
        "ErrorInvalidUsername": "Enter a valid GitHub URL or username",
        "ErrorInvalidSelection": "Select the default view, all years, or a four digit year",
        "ErrorProfileNotFound": "The profile could not be found",
        "ErrorYearNotFound": "No contributions are available for {year}",
        "ErrorFetchFailed": "Failed to fetch the profile",
    },
    "en-US": {
        "ChartTitle": "GitHub Contributions",
    },
    "ja": {
        "ChartTitle": "GitHub コントリビューション",
        "LegendLess": "少",
        "LegendMore": "多",
        "TotalLastYear": "過去1年間のコントリビューション: {total}",
        "TotalInYear": "{year}年のコントリビューション: {total}",
        "TotalAllYears": "全期間のコントリビューション: {total}",
        "ErrorInvalidUsername": "有効なGitHubのURLまたはユーザー名を入力してください",
        "ErrorProfileNotFound": "プロフィールが見つかりませんでした",
        "ErrorYearNotFound": "{year}年のコントリビューションはありません",
        "ErrorFetchFailed": "プロフィールの取得に失敗しました",
    },
    "de": {
        "ChartTitle": "GitHub-Beiträge",
        "LegendLess": "Weniger",
        "LegendMore": "Mehr",
        "TotalLastYear": "{total} Beiträge im letzten Jahr",
        "TotalInYear": "{total} Beiträge in {year}",
        "TotalAllYears": "{total} Beiträge insgesamt",
        "ErrorInvalidUsername": "Gib eine gültige GitHub-URL oder einen Benutzernamen ein",
        "ErrorProfileNotFound": "Das Profil wurde nicht gefunden",
        "ErrorFetchFailed": "Das Profil konnte nicht abgerufen werden",
    },
    "es": {
        "ChartTitle": "Contribuciones de GitHub",
        "LegendLess": "Menos",
        "LegendMore": "Más",
        "TotalLastYear": "{total} contribuciones en el último año",
        "TotalInYear": "{total} contribuciones en {year}",
        "ErrorProfileNotFound": "No se encontró el perfil",
    },
    "fr": {
        "ChartTitle": "Contributions GitHub",
        "LegendLess": "Moins",
        "LegendMore": "Plus",
        "TotalLastYear": "{total} contributions au cours de la dernière année",
        "TotalInYear": "{total} contributions en {year}",
        "ErrorProfileNotFound": "Le profil est introuvable",
    },
    "hi": {
        "ChartTitle": "GitHub योगदान",
        "LegendLess": "कम",
        "LegendMore": "अधिक",
    },
    "ko": {
        "ChartTitle": "GitHub 기여",
        "LegendLess": "적음",
        "LegendMore": "많음",
        "TotalLastYear": "지난 1년간 {total}회 기여",
        "TotalInYear": "{year}년 {total}회 기여",
    },
    "zh-Hans": {
        "ChartTitle": "GitHub 贡献",
        "LegendLess": "少",
        "LegendMore": "多",
        "TotalLastYear": "过去一年共 {total} 次贡献",
        "TotalInYear": "{year} 年共 {total} 次贡献",
        "ErrorProfileNotFound": "未找到该个人资料",
    },
}


def culture_chain(culture: str | None) -> list[str]:
    """Return `culture` followed by its parents, most specific first."""

    chain: list[str] = []
    current = (culture or "").strip()
    while current:
        chain.append(current)
        current = current.rpartition("-")[0]
    return chain


def get_string(key: str, culture: str | None = None) -> str:
    if not key:
        return ""

    for name in [*culture_chain(culture), NEUTRAL, *FALLBACK_CULTURES]:
        value = TRANSLATIONS.get(name, {}).get(key)
        if value:
            return value
    return key


def format_string(key: str, culture: str | None = None, **values: object) -> str:
    return get_string(key, culture).format(**values)
