"""Collaborator interfaces used by the highlight pipeline."""
from pathlib import Path
from typing import Optional, Protocol

from .stats import RoundStats
from .window import ClipWindow


class Prober(Protocol):
    async def duration(self, media_path: Path) -> Optional[float]:
        """Return duration in seconds, or None when it cannot be determined."""


class Transcoder(Protocol):
    async def extract(self, source_path: Path, window: ClipWindow, output_path: Path) -> None:
        """Write up to window.length_sec of source starting at window.start_sec."""
    
    async def composite(
        self,
        clip_path: Path,
        overlay_path: Path,
        output_path: Path,
        width: int,
        height: int,
    ) -> None:
        """Fill a width x height frame with the clip and burn the overlay in."""


class RasterRenderer(Protocol):
    def render(self, stats: RoundStats, output_path: Path) -> None:
        """Write a transparent PNG statistics overlay."""
