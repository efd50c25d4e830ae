"""Tests for overlay text formatting and rendering."""
import math

import pytest
from PIL import Image

from hityourday.pipeline.config import HighlightConfig
from hityourday.pipeline.overlay import render_overlay, render_overlay_image, PANEL_FILL
from hityourday.pipeline.stats import (
    RoundStats,
    build_overlay_text,
    format_count,
    format_punches,
    format_round_time,
    format_stat,
)


def _stats(**overrides):
    values = dict(
        punch_count=137,
        round_seconds=180,
        pace=45.7,
        top_speed_estimate=22.3,
        streak_days=5,
    )
    values.update(overrides)
    return RoundStats(**values)


class TestFormatPunches:
    """Tests for compact punch counts."""
    
    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        (950, "950"),
        (999, "999"),
        (1000, "1.0K"),
        (1500, "1.5K"),
        (9949, "9.9K"),
        (10000, "10K"),
        (12000, "12K"),
        (12500, "13K"),
    ])
    def test_formats(self, value, expected):
        assert format_punches(value) == expected
    
    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, None, "abc"])
    def test_non_finite_is_placeholder(self, value):
        assert format_punches(value) == "--"


class TestFormatRoundTime:
    """Tests for M:SS round length."""
    
    @pytest.mark.parametrize("value,expected", [
        (0, "0:00"),
        (5, "0:05"),
        (59.4, "0:59"),
        (59.5, "1:00"),
        (180, "3:00"),
        (754, "12:34"),
        (-3, "0:00"),
    ])
    def test_formats(self, value, expected):
        assert format_round_time(value) == expected
    
    def test_non_finite_is_placeholder(self):
        assert format_round_time(math.nan) == "--"


class TestFormatStat:
    """Tests for numeric stat values."""
    
    def test_one_decimal(self):
        assert format_stat(45.7) == "45.7"
        assert format_stat(22) == "22.0"
    
    def test_non_finite_is_placeholder(self):
        assert format_stat(math.inf) == "--"
        assert format_stat(math.nan) == "--"
    
    def test_count_drops_trailing_zero(self):
        assert format_count(5.0) == "5"
        assert format_count(2.5) == "2.5"


class TestOverlayText:
    """Tests for overlay text content."""
    
    def test_round_card(self):
        text = build_overlay_text(_stats())
        assert text.headline == "137 PUNCHES"
        assert text.round_line == "3:00 ROUND"
        assert text.pace_value == "45.7"
        assert text.speed_value == "22.3"
        assert text.streak_line == "5 DAY STREAK"
        assert "HIT YOUR DAY" in text.lines()
        assert "@hityourday" in text.lines()
    
    @pytest.mark.parametrize("streak", [0, 1])
    def test_no_streak_line_for_first_day(self, streak):
        text = build_overlay_text(_stats(streak_days=streak))
        assert text.streak_line is None
        assert not any("STREAK" in line for line in text.lines())
    
    def test_streak_line_from_second_day(self):
        text = build_overlay_text(_stats(streak_days=2))
        assert text.streak_line == "2 DAY STREAK"
    
    def test_non_finite_fields(self):
        """Non-finite values never leak NaN or inf into the card."""
        text = build_overlay_text(_stats(
            punch_count=math.nan,
            round_seconds=math.inf,
            pace=math.nan,
            top_speed_estimate=-math.inf,
            streak_days=math.nan,
        ))
        joined = " ".join(text.lines())
        assert "nan" not in joined.lower()
        assert "inf" not in joined.lower()
        assert text.headline == "-- PUNCHES"
        assert text.round_line == "-- ROUND"
        assert text.pace_value == "--"
        assert text.speed_value == "--"
        assert text.streak_line is None
    
    def test_same_stats_same_text(self):
        assert build_overlay_text(_stats()) == build_overlay_text(_stats())
    
    def test_implausible_values_rendered_as_is(self):
        text = build_overlay_text(_stats(pace=9999.0, top_speed_estimate=-4.0))
        assert text.pace_value == "9999.0"
        assert text.speed_value == "-4.0"


class TestRoundStats:
    """Tests for RoundStats construction."""
    
    def test_from_round_derives_pace(self):
        stats = RoundStats.from_round(punch_count=90, round_seconds=120)
        assert stats.pace == 45.0
        assert stats.top_speed_estimate == 0.0
    
    def test_from_round_keeps_supplied_pace(self):
        stats = RoundStats.from_round(punch_count=90, round_seconds=120, pace=50.0)
        assert stats.pace == 50.0
    
    def test_from_round_zero_length_round(self):
        stats = RoundStats.from_round(punch_count=10, round_seconds=0)
        assert stats.pace == 0.0
    
    def test_shows_streak(self):
        assert not _stats(streak_days=1).shows_streak
        assert _stats(streak_days=2).shows_streak


class TestRenderOverlay:
    """Tests for the Pillow overlay renderer."""
    
    def test_canvas_is_transparent_vertical_frame(self):
        image = render_overlay_image(_stats())
        assert image.mode == "RGBA"
        assert image.size == (1080, 1920)
        # Outside the panels nothing is drawn
        assert image.getpixel((5, 5))[3] == 0
        assert image.getpixel((540, 1000))[3] == 0
    
    def test_panels_are_translucent(self):
        image = render_overlay_image(_stats())
        # Inside the card, away from text
        assert image.getpixel((75, 330))[3] == PANEL_FILL[3]
        # Inside the brand bar, away from text
        assert image.getpixel((75, 1740))[3] == PANEL_FILL[3]
    
    def test_streak_changes_card(self):
        with_streak = render_overlay_image(_stats(streak_days=5))
        without = render_overlay_image(_stats(streak_days=1))
        streak_band = (100, 560, 980, 610)
        assert with_streak.crop(streak_band).tobytes() != without.crop(streak_band).tobytes()
        # Bottom bar is the same either way
        bar = (60, 1640, 1020, 1840)
        assert with_streak.crop(bar).tobytes() == without.crop(bar).tobytes()
    
    def test_non_finite_stats_render(self):
        image = render_overlay_image(_stats(punch_count=math.nan, pace=math.inf))
        assert image.size == (1080, 1920)
    
    def test_custom_frame_size(self):
        image = render_overlay_image(_stats(), HighlightConfig(frame_width=540, frame_height=960))
        assert image.size == (540, 960)
    
    def test_writes_png_with_alpha(self, tmp_path):
        path = render_overlay(_stats(), tmp_path / "nested" / "overlay.png")
        assert path.exists()
        with Image.open(path) as image:
            assert image.format == "PNG"
            assert image.mode == "RGBA"
            assert image.size == (1080, 1920)


class TestFontOverride:
    """Tests for configured font paths."""

    def test_override_change_is_followed(self, monkeypatch, tmp_path):
        from hityourday.config import settings
        from hityourday.pipeline import overlay

        def _truetype(path, size):
            return ("font", path, size)

        monkeypatch.setattr(overlay.ImageFont, "truetype", _truetype)

        monkeypatch.setattr(settings, "overlay_bold_font_path", tmp_path / "first.ttf")
        assert overlay._load_font(37, True) == ("font", str(tmp_path / "first.ttf"), 37)

        monkeypatch.setattr(settings, "overlay_bold_font_path", tmp_path / "second.ttf")
        assert overlay._load_font(37, True) == ("font", str(tmp_path / "second.ttf"), 37)
