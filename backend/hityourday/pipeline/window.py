"""Clip window selection.

Picks the part of the source recording that goes into the highlight.
"""
import math
import random
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClipWindow:
    """A time range of the source recording selected for extraction."""
    start_sec: float
    length_sec: float
    
    @property
    def end_sec(self) -> float:
        return self.start_sec + self.length_sec
    
    def to_dict(self) -> dict:
        return {
            "start_sec": self.start_sec,
            "length_sec": self.length_sec,
        }


def select_window(
    duration: Optional[float],
    clip_seconds: float,
    rng: Optional[random.Random] = None,
) -> ClipWindow:
    """
    Select a clip window that fits inside the source.
    
    When the duration is unknown, not finite, or no longer than the clip,
    the window starts at 0 and the extractor emits whatever the source has.
    Otherwise the start is drawn uniformly from [0, duration - clip_seconds].
    
    Args:
        duration: Source duration in seconds, or None if unknown
        clip_seconds: Fixed clip length
        rng: Optional random source (module-level random if None)
        
    Returns:
        ClipWindow
    """
    if duration is None or not math.isfinite(duration) or duration <= clip_seconds:
        return ClipWindow(start_sec=0.0, length_sec=clip_seconds)
    
    max_start = duration - clip_seconds
    start = (rng or random).uniform(0.0, max_start)
    
    # uniform() may round up to the upper bound
    start = min(max(0.0, start), max_start)
    
    return ClipWindow(start_sec=start, length_sec=clip_seconds)
