# Highlight pipeline
"""
Highlight Pipeline: Branded Vertical Workout Clips

Turns a self-filmed round into a short shareable clip with the round's
statistics burned in.

Pipeline stages:
1. Probe: Read the recording's duration (unknown is tolerated)
2. Window: Pick a random 5 second window that fits inside the recording
3. Extract: Transcode that window to a normalized mp4
4. Overlay: Render the statistics card to a transparent PNG
5. Composite: Fill a 1080x1920 frame and burn the overlay in
"""

from .errors import HighlightGenerationError
from .runner import HighlightPipeline, generate_highlight
from .stats import RoundStats

__all__ = [
    "HighlightGenerationError",
    "HighlightPipeline",
    "RoundStats",
    "generate_highlight",
]
