"""Retention sweep for published highlight videos."""
import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

from hityourday.config import settings

logger = logging.getLogger(__name__)

# Finals expire; stray intermediates are swept by the same rule
SWEEP_PATTERNS = ("final_*.mp4", "clip_*.mp4", "overlay_*.png")


def cleanup_old_highlights(
    max_age_hours: Optional[float] = None,
    uploads_dir: Optional[Path] = None,
    now: Optional[float] = None,
) -> int:
    """
    Delete highlight artifacts older than the retention window.
    
    Args:
        max_age_hours: Retention window (settings default if None)
        uploads_dir: Directory to sweep (settings default if None)
        now: Current epoch seconds (time.time() if None)
        
    Returns:
        Number of files deleted
    """
    if max_age_hours is None:
        max_age_hours = settings.highlight_retention_hours
    uploads_dir = Path(uploads_dir or settings.uploads_dir)
    now = time.time() if now is None else now
    
    if not uploads_dir.is_dir():
        return 0
    
    cutoff = now - max_age_hours * 3600
    deleted = 0
    
    for pattern in SWEEP_PATTERNS:
        for path in uploads_dir.glob(pattern):
            try:
                if path.is_file() and path.stat().st_mtime < cutoff:
                    path.unlink()
                    deleted += 1
            except OSError as e:
                logger.warning(f"Could not remove expired {path}: {e}")
    
    if deleted:
        logger.info(f"Removed {deleted} expired highlight files from {uploads_dir}")
    return deleted


async def run_retention_loop(interval_seconds: Optional[int] = None):
    """Sweep once now and then every interval until cancelled."""
    interval_seconds = interval_seconds or settings.retention_sweep_interval_seconds
    while True:
        try:
            await asyncio.to_thread(cleanup_old_highlights)
        except Exception as e:
            logger.error(f"Retention sweep failed: {e}")
        await asyncio.sleep(interval_seconds)
