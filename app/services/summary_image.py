from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

WIDTH = 600
HEIGHT = 400
PADDING = 20
LINE_HEIGHT = 20
BACKGROUND = "#f0f0f0"
FOREGROUND = "#333333"


def format_gdp(gdp: Decimal | float | None) -> str:
    if gdp is None:
        return "N/A"
    return f"{Decimal(str(gdp)):,.0f}"


def format_leader(rank: int, name: str, gdp: Decimal | float | None) -> str:
    return f"{rank}. {name} (GDP: ${format_gdp(gdp)})"


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")


def summary_lines(
    total_countries: int, leaders: list[tuple[str, Decimal | None]], refreshed_at: datetime
) -> list[str]:
    lines = [
        f"Total Countries: {total_countries}",
        f"Last Refresh: {format_timestamp(refreshed_at)}",
        "",
        "Top 5 Countries by Estimated GDP:",
    ]
    lines.extend(format_leader(rank, name, gdp) for rank, (name, gdp) in enumerate(leaders[:5], start=1))
    return lines


def _load_font():
    try:
        return ImageFont.truetype("DejaVuSansMono.ttf", 16)
    except OSError:
        return ImageFont.load_default()


def render_summary_image(
    total_countries: int,
    leaders: list[tuple[str, Decimal | None]],
    refreshed_at: datetime,
    path: Path,
) -> Path:
    """Render the refresh summary as a 600x400 PNG at ``path``, replacing any previous file."""
    image = Image.new("RGB", (WIDTH, HEIGHT), color=BACKGROUND)
    draw = ImageDraw.Draw(image)
    font = _load_font()

    y = PADDING
    for line in summary_lines(total_countries, leaders, refreshed_at):
        draw.text((PADDING, y), line, fill=FOREGROUND, font=font)
        y += LINE_HEIGHT

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, "PNG")
    return path
