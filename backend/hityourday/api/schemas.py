"""Pydantic schemas for API requests and responses."""
from typing import Optional
from pydantic import BaseModel


# =============================================================================
# Highlight Schemas
# =============================================================================

class RoundStatsResponse(BaseModel):
    """Statistics the highlight was rendered with."""
    punch_count: float
    round_seconds: float
    pace: float
    top_speed_estimate: float
    streak_days: float


class HighlightResponse(BaseModel):
    """Highlight generation result.
    
    Generation is best-effort: a failure still returns the stats with
    ``share_video_url`` unset.
    """
    share_video_url: Optional[str] = None
    stats: RoundStatsResponse
    error: Optional[str] = None


# =============================================================================
# System Schemas
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    ffmpeg_available: bool
    ffprobe_available: bool
    message: Optional[str] = None
