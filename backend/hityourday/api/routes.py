"""API routes."""
import logging
import math
import re
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, UploadFile, File, Form

from hityourday.config import settings
from hityourday.pipeline import HighlightGenerationError, RoundStats, generate_highlight
from hityourday.utils.ffmpeg import check_ffmpeg_available, check_ffprobe_available
from hityourday.api.schemas import (
    HighlightResponse,
    RoundStatsResponse,
    HealthResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


# =============================================================================
# Health & System
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Check API health and dependencies."""
    ffmpeg_ok = check_ffmpeg_available()
    ffprobe_ok = check_ffprobe_available()
    
    all_ok = ffmpeg_ok and ffprobe_ok
    
    message = None
    if not all_ok:
        missing = []
        if not ffmpeg_ok:
            missing.append("ffmpeg")
        if not ffprobe_ok:
            missing.append("ffprobe")
        message = f"Missing dependencies: {', '.join(missing)}. Highlight videos are disabled."
    
    return HealthResponse(
        status="healthy" if all_ok else "degraded",
        ffmpeg_available=ffmpeg_ok,
        ffprobe_available=ffprobe_ok,
        message=message
    )


# =============================================================================
# Highlights
# =============================================================================

@router.post("/highlights", response_model=HighlightResponse)
async def create_highlight(
    video: Optional[UploadFile] = File(None),
    punch_count: float = Form(...),
    duration_seconds: float = Form(...),
    pace: Optional[float] = Form(None),
    top_speed_mph: Optional[float] = Form(None),
    current_streak: float = Form(0),
):
    """Build a round's stats and, if a recording is attached, its highlight video."""
    if not math.isfinite(punch_count) or not math.isfinite(duration_seconds):
        raise HTTPException(status_code=400, detail="Missing/invalid required fields")
    
    stats = RoundStats.from_round(
        punch_count=punch_count,
        round_seconds=duration_seconds,
        pace=pace,
        top_speed_estimate=top_speed_mph,
        streak_days=current_streak,
    )
    response = HighlightResponse(stats=RoundStatsResponse(**stats.to_dict()))
    
    if video is None or not video.filename:
        return response
    
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", video.filename)
    temp_path = settings.temp_dir / f"upload_{int(time.time() * 1000)}_{safe_name}"
    
    try:
        settings.temp_dir.mkdir(parents=True, exist_ok=True)
        content = await video.read()
        if len(content) > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="Recording too large")
        
        with open(temp_path, "wb") as f:
            f.write(content)
        
        response.share_video_url = await generate_highlight(temp_path, stats)
        
    except HighlightGenerationError as e:
        # Stats are still returned; the highlight is optional
        logger.warning(f"Highlight generation failed at {e.stage}")
        response.error = str(e)
    except OSError as e:
        logger.warning(f"Could not store recording for highlight: {e}")
        response.error = "Highlight generation failed"
    finally:
        if temp_path.exists():
            temp_path.unlink()
    
    return response
