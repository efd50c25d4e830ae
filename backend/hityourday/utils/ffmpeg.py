"""FFmpeg and ffprobe utilities."""
import asyncio
import json
import logging
import math
import shutil
from pathlib import Path
from typing import Optional

from hityourday.config import settings

logger = logging.getLogger(__name__)


class FFmpegError(Exception):
    """FFmpeg related error."""
    pass


class ProbeUnavailable(FFmpegError):
    """Container duration could not be determined."""
    pass


def check_ffmpeg_available() -> bool:
    """Check if ffmpeg is available."""
    return shutil.which(settings.ffmpeg_path) is not None


def check_ffprobe_available() -> bool:
    """Check if ffprobe is available."""
    return shutil.which(settings.ffprobe_path) is not None


def _parse_duration(data: dict) -> float:
    """Pull a finite duration out of ffprobe JSON, preferring the container value."""
    if not isinstance(data, dict):
        raise ProbeUnavailable("Unexpected ffprobe output")
    
    container = data.get("format")
    candidates = [container.get("duration")] if isinstance(container, dict) else []
    streams = data.get("streams")
    for stream in streams if isinstance(streams, list) else []:
        if isinstance(stream, dict) and stream.get("codec_type") == "video":
            candidates.append(stream.get("duration"))
    
    for raw in candidates:
        if raw is None:
            continue
        try:
            duration = float(raw)
        except (TypeError, ValueError):
            continue
        if math.isfinite(duration) and duration >= 0:
            return duration
    
    raise ProbeUnavailable("No finite duration in container metadata")


async def get_duration(video_path: str | Path) -> float:
    """
    Get media duration in seconds using ffprobe.
    
    Args:
        video_path: Path to media file
        
    Returns:
        Duration in seconds
        
    Raises:
        ProbeUnavailable: If the file is missing, unreadable or has no duration
    """
    video_path = Path(video_path)
    if not video_path.exists():
        raise ProbeUnavailable(f"Media file not found: {video_path}")
    
    cmd = [
        settings.ffprobe_path,
        "-v", "quiet",
        "-print_format", "json",
        "-show_format",
        "-show_streams",
        str(video_path)
    ]
    
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, stderr = await proc.communicate()
    except OSError as e:
        raise ProbeUnavailable(f"ffprobe could not be started: {e}")
    
    if proc.returncode != 0:
        raise ProbeUnavailable(f"ffprobe failed: {stderr.decode(errors='ignore')}")
    
    try:
        data = json.loads(stdout.decode())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProbeUnavailable(f"Failed to parse ffprobe output: {e}")
    
    return _parse_duration(data)


async def probe_duration(video_path: str | Path) -> Optional[float]:
    """Duration in seconds, or None when the container cannot be probed."""
    try:
        return await get_duration(video_path)
    except ProbeUnavailable as e:
        logger.warning(f"Duration unknown for {video_path}: {e}")
        return None


async def _run_ffmpeg(cmd: list[str], action: str) -> None:
    """Run an ffmpeg command to completion, raising FFmpegError on failure."""
    logger.debug(f"ffmpeg cmd: {' '.join(cmd)}")
    
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise FFmpegError(f"{action} failed: could not start ffmpeg: {e}")
    
    _, stderr = await proc.communicate()
    
    if proc.returncode != 0:
        raise FFmpegError(f"{action} failed: {stderr.decode(errors='ignore')}")


async def extract_clip(
    source_path: str | Path,
    output_path: str | Path,
    start_time: float,
    duration: float,
) -> Path:
    """
    Extract a fixed-length clip from the source video.
    
    Video and audio are both mapped optionally so a recording without an
    audio track still produces a clip. A source shorter than ``duration``
    yields a correspondingly shorter clip.
    
    Args:
        source_path: Path to source video
        output_path: Path for output file
        start_time: Start time in seconds
        duration: Maximum clip length in seconds
        
    Returns:
        Path to extracted clip
    """
    source_path = Path(source_path)
    output_path = Path(output_path)
    
    output_path.parent.mkdir(parents=True, exist_ok=True)
    
    cmd = [
        settings.ffmpeg_path,
        "-y",
        "-ss", f"{max(0.0, start_time):.3f}",
        "-i", str(source_path),
        "-map", "0:v:0?",
        "-map", "0:a:0?",
        "-t", f"{duration:.3f}",
        "-c:v", settings.export_video_codec,
        "-preset", settings.export_video_preset,
        "-crf", str(settings.export_video_crf),
        "-c:a", settings.export_audio_codec,
        "-b:a", settings.export_audio_bitrate,
        "-movflags", "+faststart",
        str(output_path)
    ]
    
    await _run_ffmpeg(cmd, "Clip extraction")
    return output_path


def build_vertical_overlay_filter(width: int, height: int) -> tuple[str, str]:
    """
    Build the filtergraph that fills a vertical frame and burns in an overlay.
    
    Input 0 is the video, input 1 the overlay image. The video is scaled to
    cover the frame, center-cropped to exactly ``width``x``height``, and the
    overlay (scaled to the same frame) is laid on top at the origin.
    
    Returns:
        (filtergraph, output_label)
    """
    parts = [
        f"[0:v]scale={width}:{height}:force_original_aspect_ratio=increase[scaled]",
        f"[scaled]crop={width}:{height}:(in_w-{width})/2:(in_h-{height})/2[base]",
        f"[1:v]scale={width}:{height}[ovl]",
        "[base][ovl]overlay=0:0[outv]",
    ]
    return ";".join(parts), "outv"


async def burn_overlay_vertical(
    clip_path: str | Path,
    overlay_path: str | Path,
    output_path: str | Path,
    width: int,
    height: int,
) -> Path:
    """
    Composite an overlay image onto a clip and export it in vertical format.
    
    Args:
        clip_path: Path to the extracted clip
        overlay_path: Path to a transparent PNG overlay
        output_path: Path for the final video
        width: Output frame width
        height: Output frame height
        
    Returns:
        Path to the final video
    """
    clip_path = Path(clip_path)
    overlay_path = Path(overlay_path)
    output_path = Path(output_path)
    
    output_path.parent.mkdir(parents=True, exist_ok=True)
    
    filtergraph, label = build_vertical_overlay_filter(width, height)
    
    cmd = [
        settings.ffmpeg_path,
        "-y",
        "-i", str(clip_path),
        "-i", str(overlay_path),
        "-filter_complex", filtergraph,
        "-map", f"[{label}]",
        "-map", "0:a:0?",
        "-c:v", settings.export_video_codec,
        "-preset", settings.export_video_preset,
        "-crf", str(settings.export_video_crf),
        "-pix_fmt", settings.export_pixel_format,
        "-c:a", settings.export_audio_codec,
        "-b:a", settings.export_audio_bitrate,
        "-movflags", "+faststart",
        str(output_path)
    ]
    
    await _run_ffmpeg(cmd, "Overlay composition")
    return output_path
