"""Application configuration."""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )
    
    # App settings
    app_name: str = "HitYourDay"
    debug: bool = True
    
    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    
    # Data directories
    uploads_dir: Path = Path("./public/uploads")  # Served publicly
    uploads_url_prefix: str = "/uploads"
    temp_dir: Path = Path("./temp")  # Incoming recordings before processing
    max_upload_bytes: int = 50 * 1024 * 1024
    
    # FFmpeg settings
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"
    
    # Export settings
    export_video_codec: str = "libx264"
    export_video_preset: str = "fast"
    export_video_crf: int = 23
    export_pixel_format: str = "yuv420p"
    export_audio_codec: str = "aac"
    export_audio_bitrate: str = "128k"
    
    # Overlay fonts (falls back to bundled DejaVu / Pillow default)
    overlay_font_path: Optional[Path] = None
    overlay_bold_font_path: Optional[Path] = None
    
    # Retention
    highlight_retention_hours: float = 24.0
    retention_sweep_interval_seconds: int = 3600


settings = Settings()

# Ensure directories exist
settings.uploads_dir.mkdir(parents=True, exist_ok=True)
settings.temp_dir.mkdir(parents=True, exist_ok=True)
