"""Round statistics and their display formatting."""
import math
from dataclasses import dataclass
from typing import Optional

PLACEHOLDER = "--"


def _is_finite(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class RoundStats:
    """Statistics for one completed round, rendered as-is on the overlay."""
    punch_count: float
    round_seconds: float
    pace: float  # punches per minute
    top_speed_estimate: float  # mph, supplied by the caller
    streak_days: float = 0
    
    @classmethod
    def from_round(
        cls,
        punch_count: float,
        round_seconds: float,
        pace: Optional[float] = None,
        top_speed_estimate: Optional[float] = None,
        streak_days: float = 0,
    ) -> "RoundStats":
        """
        Build stats from raw round fields.
        
        A missing or non-positive pace is derived from the punch count and
        round length; a missing top speed becomes 0.
        """
        if pace is None or not _is_finite(pace) or pace <= 0:
            if _is_finite(round_seconds) and round_seconds > 0 and _is_finite(punch_count):
                pace = punch_count / round_seconds * 60
            else:
                pace = 0.0
        
        if top_speed_estimate is None or not _is_finite(top_speed_estimate):
            top_speed_estimate = 0.0
        
        return cls(
            punch_count=punch_count,
            round_seconds=round_seconds,
            pace=pace,
            top_speed_estimate=top_speed_estimate,
            streak_days=streak_days,
        )
    
    @property
    def shows_streak(self) -> bool:
        """A streak is only called out from the second day on."""
        return _is_finite(self.streak_days) and self.streak_days > 1
    
    def to_dict(self) -> dict:
        return {
            "punch_count": self.punch_count,
            "round_seconds": self.round_seconds,
            "pace": self.pace,
            "top_speed_estimate": self.top_speed_estimate,
            "streak_days": self.streak_days,
        }


def format_count(value) -> str:
    """Plain number, without a trailing .0 for whole values."""
    if not _is_finite(value):
        return PLACEHOLDER
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_punches(value) -> str:
    """
    Compact punch count.
    
    950 -> "950", 1500 -> "1.5K", 12000 -> "12K".
    """
    if not _is_finite(value):
        return PLACEHOLDER
    value = float(value)
    if value < 1000:
        return format_count(value)
    if value < 10000:
        return f"{value / 1000:.1f}K"
    return f"{_round_half_up(value / 1000)}K"


def format_round_time(seconds) -> str:
    """Round length as M:SS."""
    if not _is_finite(seconds):
        return PLACEHOLDER
    total = max(0, _round_half_up(float(seconds)))
    minutes, rest = divmod(total, 60)
    return f"{minutes}:{rest:02d}"


def format_stat(value, digits: int = 1) -> str:
    """Fixed-point stat value."""
    if not _is_finite(value):
        return PLACEHOLDER
    return f"{float(value):.{digits}f}"


@dataclass(frozen=True)
class OverlayText:
    """Every string drawn on the overlay, derived only from RoundStats."""
    headline: str
    round_line: str
    pace_label: str
    pace_value: str
    pace_unit: str
    speed_label: str
    speed_value: str
    speed_unit: str
    streak_line: Optional[str]
    brand: str
    handle: str
    
    def lines(self) -> list[str]:
        """All drawn strings in drawing order."""
        out = [
            self.headline,
            self.round_line,
            self.pace_label,
            self.speed_label,
            self.pace_value,
            self.speed_value,
            self.pace_unit,
            self.speed_unit,
        ]
        if self.streak_line:
            out.append(self.streak_line)
        out.extend([self.brand, self.handle])
        return out


def build_overlay_text(stats: RoundStats) -> OverlayText:
    """Format the statistics card for a round."""
    streak_line = None
    if stats.shows_streak:
        streak_line = f"{format_count(stats.streak_days)} DAY STREAK"
    
    return OverlayText(
        headline=f"{format_punches(stats.punch_count)} PUNCHES",
        round_line=f"{format_round_time(stats.round_seconds)} ROUND",
        pace_label="PACE",
        pace_value=format_stat(stats.pace),
        pace_unit="punches/min",
        speed_label="TOP SPEED",
        speed_value=format_stat(stats.top_speed_estimate),
        speed_unit="mph (est.)",
        streak_line=streak_line,
        brand="HIT YOUR DAY",
        handle="@hityourday",
    )
