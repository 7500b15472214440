from pydantic import BaseModel


class ThemeColors(BaseModel):
    background: str
    text: str
    sub_text: str


class Palette(BaseModel):
    """Five swatches, from no activity to the busiest days."""

    name: str
    grades: tuple[str, str, str, str, str]


THEMES: dict[str, ThemeColors] = {
    "Dark": ThemeColors(background="#0d1117", text="#c9d1d9", sub_text="#8b949e"),
    "Light": ThemeColors(background="#ffffff", text="#24292f", sub_text="#57606a"),
}

PALETTES: list[Palette] = [
    Palette(name="standard", grades=("#ebedf0", "#9be9a8", "#40c463", "#30a14e", "#216e39")),
    Palette(name="classic", grades=("#ebedf0", "#c6e48b", "#7bc96f", "#239a3b", "#196127")),
    Palette(name="githubDark", grades=("#161b22", "#003820", "#00602d", "#10983d", "#27d545")),
    Palette(name="halloween", grades=("#ebedf0", "#FFEE4A", "#FFC501", "#FE9600", "#03001C")),
    Palette(name="teal", grades=("#ebedf0", "#7FFFD4", "#76EEC6", "#66CDAA", "#458B74")),
    Palette(name="leftPad", grades=("#2F2F2F", "#646464", "#A5A5A5", "#DDDDDD", "#F6F6F6")),
    Palette(name="dracula", grades=("#282a36", "#44475a", "#6272a4", "#bd93f9", "#ff79c6")),
    Palette(name="blue", grades=("#222222", "#263342", "#344E6C", "#416895", "#4F83BF")),
    Palette(name="panda", grades=("#242526", "#34353B", "#6FC1FF", "#19f9d8", "#FF4B82")),
    Palette(name="sunny", grades=("#fff9ae", "#f8ed62", "#e9d700", "#dab600", "#a98600")),
    Palette(name="pink", grades=("#ebedf0", "#e48bdc", "#ca5bcc", "#a74aa8", "#61185f")),
    Palette(name="YlGnBu", grades=("#ebedf0", "#a1dab4", "#41b6c4", "#2c7fb8", "#253494")),
    Palette(name="solarizedDark", grades=("#073642", "#268bd2", "#2aa198", "#b58900", "#d33682")),
    Palette(name="solarizedLight", grades=("#eee8d5", "#b58900", "#cb4b16", "#dc322f", "#6c71c4")),
]

PALETTE_NAMES = [palette.name for palette in PALETTES]


def get_palette(name: str) -> Palette:
    for palette in PALETTES:
        if palette.name == name:
            return palette
    return PALETTES[0]


def get_theme(mode: str) -> ThemeColors:
    if mode == "Dark":
        return THEMES["Dark"]
    return THEMES["Light"]
