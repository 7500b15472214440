from io import BytesIO

from PIL import Image
from PIL import ImageDraw
from PIL import ImageFont

from contributions.services.calendar_layout import DAYS_PER_WEEK
from contributions.services.calendar_layout import CalendarLayout
from contributions.services.palettes import Palette
from contributions.services.palettes import ThemeColors


PADDING = 40
CELL_SIZE = 11
CELL_SPACING = 3
WEEK_WIDTH = CELL_SIZE + CELL_SPACING
DAY_HEIGHT = CELL_SIZE + CELL_SPACING
LABEL_GUTTER = 30
TITLE_OFFSET = 80
LEGEND_OFFSET = 50
LEGEND_SWATCH_STEP = CELL_SIZE + CELL_SPACING + 5
MIN_WIDTH = 900

MONTH_NAMES = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
DAY_LABELS = {1: "Mon", 3: "Wed", 5: "Fri"}


def month_label(month: int) -> str:
    if month < 1 or month > 12:
        return ""
    return MONTH_NAMES[month - 1]


def canvas_size(layout: CalendarLayout) -> tuple[int, int]:
    grid_width = PADDING + LABEL_GUTTER + layout.weeks * WEEK_WIDTH + PADDING
    height = PADDING + TITLE_OFFSET + DAYS_PER_WEEK * DAY_HEIGHT + LEGEND_OFFSET + 30 + PADDING
    return max(MIN_WIDTH, grid_width), height


def render_heatmap(
    layout: CalendarLayout,
    theme: ThemeColors,
    palette: Palette,
    title: str = "GitHub Contributions",
    total_label: str | None = None,
    legend_less: str = "Less",
    legend_more: str = "More",
) -> Image.Image:
    """Paint the calendar grid, month labels, legend and optional total."""

    width, height = canvas_size(layout)
    image = Image.new("RGB", (width, height), theme.background)
    draw = ImageDraw.Draw(image)

    title_font = ImageFont.load_default(size=24)
    label_font = ImageFont.load_default(size=12)
    day_font = ImageFont.load_default(size=10)

    title_width = draw.textlength(title, font=title_font)
    draw.text(((width - title_width) / 2, PADDING), title, fill=theme.text, font=title_font)

    start_x = PADDING + LABEL_GUTTER
    start_y = PADDING + TITLE_OFFSET

    for weekday, text in DAY_LABELS.items():
        y = start_y + weekday * DAY_HEIGHT + CELL_SIZE / 2
        draw.text((start_x - LABEL_GUTTER, y - 5), text, fill=theme.sub_text, font=day_font)

    for label in layout.month_labels:
        x = start_x + label.week * WEEK_WIDTH
        draw.text((x, start_y - 24), month_label(label.month), fill=theme.sub_text, font=label_font)

    for cell in layout.cells:
        x = start_x + cell.week * WEEK_WIDTH
        y = start_y + cell.weekday * DAY_HEIGHT
        _draw_cell(draw, x, y, palette.grades[cell.level])

    legend_y = start_y + DAYS_PER_WEEK * DAY_HEIGHT + LEGEND_OFFSET
    draw.text((start_x, legend_y - 6), legend_less, fill=theme.sub_text, font=label_font)
    legend_x = start_x + 50
    for index, color in enumerate(palette.grades):
        _draw_cell(draw, legend_x + index * LEGEND_SWATCH_STEP, legend_y - CELL_SIZE / 2, color)
    draw.text(
        (legend_x + len(palette.grades) * LEGEND_SWATCH_STEP + 10, legend_y - 6),
        legend_more,
        fill=theme.sub_text,
        font=label_font,
    )

    if total_label:
        total_width = draw.textlength(total_label, font=label_font)
        grid_right = start_x + max(layout.weeks, 1) * WEEK_WIDTH
        draw.text((grid_right - total_width, legend_y - 6), total_label, fill=theme.text, font=label_font)

    return image


def _draw_cell(draw: ImageDraw.ImageDraw, x: float, y: float, color: str) -> None:
    left = round(x)
    top = round(y)
    draw.rectangle((left, top, left + CELL_SIZE - 1, top + CELL_SIZE - 1), fill=color)


def to_png_bytes(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
