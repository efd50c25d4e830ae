"""Default collaborators: ffprobe/ffmpeg and Pillow."""
from pathlib import Path
from typing import Optional

from hityourday.utils.ffmpeg import (
    probe_duration,
    extract_clip,
    burn_overlay_vertical,
)
from .config import HighlightConfig, DEFAULT_HIGHLIGHT_CONFIG
from .overlay import render_overlay
from .stats import RoundStats
from .window import ClipWindow


class FFprobeProber:
    """Duration prober backed by ffprobe."""
    
    async def duration(self, media_path: Path) -> Optional[float]:
        return await probe_duration(media_path)


class FFmpegTranscoder:
    """Clip extraction and composition backed by ffmpeg."""
    
    async def extract(self, source_path: Path, window: ClipWindow, output_path: Path) -> None:
        await extract_clip(source_path, output_path, window.start_sec, window.length_sec)
    
    async def composite(
        self,
        clip_path: Path,
        overlay_path: Path,
        output_path: Path,
        width: int,
        height: int,
    ) -> None:
        await burn_overlay_vertical(clip_path, overlay_path, output_path, width, height)


class PillowRenderer:
    """Statistics overlay rendered with Pillow."""
    
    def __init__(self, config: Optional[HighlightConfig] = None):
        self.config = config or DEFAULT_HIGHLIGHT_CONFIG
    
    def render(self, stats: RoundStats, output_path: Path) -> None:
        render_overlay(stats, output_path, self.config)
