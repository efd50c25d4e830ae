"""Statistics overlay rendering.

Draws the round statistics card and the brand bar onto a transparent
vertical canvas. Layout is fixed; only the text comes from the stats.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from hityourday.config import settings
from .config import HighlightConfig, DEFAULT_HIGHLIGHT_CONFIG
from .stats import RoundStats, OverlayText, build_overlay_text

logger = logging.getLogger(__name__)

# Layout is expressed on a 1080x1920 canvas and scaled for other frames
BASE_WIDTH = 1080
BASE_HEIGHT = 1920

PAD = 60
PANEL_RADIUS = 40
PANEL_FILL = (0, 0, 0, 148)

CARD_Y = 60
CARD_H = 560
BAR_H = 200
BAR_BOTTOM_MARGIN = 80

COLUMN_OFFSET = 260

WHITE = (255, 255, 255, 255)

_BOLD_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/TTF/DejaVuSans-Bold.ttf",
    "/Library/Fonts/Arial Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "DejaVuSans-Bold.ttf",
]
_REGULAR_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/Library/Fonts/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "DejaVuSans.ttf",
]


def _white(alpha: float) -> tuple[int, int, int, int]:
    return (255, 255, 255, int(round(255 * alpha)))


def _load_font(size: int, bold: bool):
    """Load the overlay font, honouring the configured override path."""
    override = settings.overlay_bold_font_path if bold else settings.overlay_font_path
    return _load_font_cached(size, bold, str(override) if override else None)


@lru_cache(maxsize=64)
def _load_font_cached(size: int, bold: bool, override: Optional[str]):
    """Load a TrueType font, falling back to Pillow's default font."""
    candidates = [override] if override else []
    candidates += _BOLD_FONT_CANDIDATES if bold else _REGULAR_FONT_CANDIDATES
    
    for path in candidates:
        try:
            return ImageFont.truetype(path, size=size)
        except OSError:
            continue
    
    logger.warning(f"No TrueType font found, using Pillow default at {size}px")
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        # Pillow < 10.1 has no sized default font
        return ImageFont.load_default()


def _text_size(draw: ImageDraw.ImageDraw, text: str, font) -> tuple[int, int, tuple]:
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0], bbox[3] - bbox[1], bbox


def _fit_font(draw: ImageDraw.ImageDraw, text: str, size: int, bold: bool, max_width: int):
    """Largest font no bigger than ``size`` whose rendering of text fits max_width."""
    font = _load_font(size, bold)
    while size > 12:
        width, _, _ = _text_size(draw, text, font)
        if width <= max_width:
            break
        size = int(size * 0.92)
        font = _load_font(size, bold)
    return font


def _draw_centered(
    draw: ImageDraw.ImageDraw,
    text: str,
    center: tuple[float, float],
    size: int,
    fill: tuple,
    max_width: int,
    bold: bool = True,
):
    """Draw text with its bounding box centered on ``center``."""
    font = _fit_font(draw, text, size, bold, max_width)
    _, _, bbox = _text_size(draw, text, font)
    x = center[0] - (bbox[0] + bbox[2]) / 2
    y = center[1] - (bbox[1] + bbox[3]) / 2
    draw.text((x, y), text, font=font, fill=fill)


def _draw_panels(size: tuple[int, int]) -> Image.Image:
    """Translucent stat card at the top and brand bar at the bottom."""
    width, height = size
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    
    draw.rounded_rectangle(
        (PAD, CARD_Y, width - PAD, CARD_Y + CARD_H),
        radius=PANEL_RADIUS,
        fill=PANEL_FILL,
    )
    
    bar_y = height - BAR_H - BAR_BOTTOM_MARGIN
    draw.rounded_rectangle(
        (PAD, bar_y, width - PAD, bar_y + BAR_H),
        radius=PANEL_RADIUS,
        fill=PANEL_FILL,
    )
    return layer


def _draw_text(size: tuple[int, int], text: OverlayText) -> Image.Image:
    """All text and the card divider on their own transparent layer."""
    width, height = size
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    
    cx = width / 2
    card_inner = width - PAD * 2 - 80
    column_width = COLUMN_OFFSET * 2 - 40
    left_x = cx - COLUMN_OFFSET
    right_x = cx + COLUMN_OFFSET
    
    # Headline + round length
    _draw_centered(draw, text.headline, (cx, CARD_Y + 120), 110, WHITE, card_inner)
    _draw_centered(draw, text.round_line, (cx, CARD_Y + 215), 52, _white(0.92), card_inner)
    
    # Divider
    draw.line(
        [(PAD + 40, CARD_Y + 265), (width - PAD - 40, CARD_Y + 265)],
        fill=_white(0.18),
        width=3,
    )
    
    # Two-column stat row
    label_y = CARD_Y + 355
    value_y = CARD_Y + 425
    _draw_centered(draw, text.pace_label, (left_x, label_y), 40, _white(0.85), column_width)
    _draw_centered(draw, text.speed_label, (right_x, label_y), 40, _white(0.85), column_width)
    _draw_centered(draw, text.pace_value, (left_x, value_y), 62, WHITE, column_width)
    _draw_centered(draw, text.speed_value, (right_x, value_y), 62, WHITE, column_width)
    _draw_centered(draw, text.pace_unit, (left_x, value_y + 60), 28, _white(0.75), column_width, bold=False)
    _draw_centered(draw, text.speed_unit, (right_x, value_y + 60), 28, _white(0.75), column_width, bold=False)
    
    if text.streak_line:
        _draw_centered(draw, text.streak_line, (cx, CARD_Y + 525), 46, _white(0.95), card_inner)
    
    # Brand bar
    bar_y = height - BAR_H - BAR_BOTTOM_MARGIN
    _draw_centered(draw, text.brand, (cx, bar_y + 75), 62, WHITE, card_inner)
    _draw_centered(draw, text.handle, (cx, bar_y + 145), 44, _white(0.92), card_inner)
    
    return layer


def render_overlay_image(
    stats: RoundStats,
    config: Optional[HighlightConfig] = None,
) -> Image.Image:
    """
    Render the statistics overlay as an RGBA image.
    
    The card is laid out on a 1080x1920 canvas; other frame sizes get a
    resized copy of that canvas.
    """
    config = config or DEFAULT_HIGHLIGHT_CONFIG
    size = (BASE_WIDTH, BASE_HEIGHT)
    
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    image = Image.alpha_composite(image, _draw_panels(size))
    image = Image.alpha_composite(image, _draw_text(size, build_overlay_text(stats)))
    
    if (config.frame_width, config.frame_height) != size:
        image = image.resize((config.frame_width, config.frame_height), Image.LANCZOS)
    
    return image


def render_overlay(
    stats: RoundStats,
    output_path: str | Path,
    config: Optional[HighlightConfig] = None,
) -> Path:
    """
    Render the statistics overlay to a PNG with alpha.
    
    Args:
        stats: Round statistics to display
        output_path: Where to write the PNG
        config: Pipeline configuration (frame size)
        
    Returns:
        Path to the PNG
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    
    image = render_overlay_image(stats, config)
    image.save(output_path, format="PNG")
    
    logger.debug(f"Wrote overlay to {output_path}")
    return output_path
