"""Highlight pipeline configuration."""
from dataclasses import dataclass


@dataclass(frozen=True)
class HighlightConfig:
    """Fixed parameters of the highlight pipeline."""
    
    # Window selection
    clip_seconds: float = 5.0
    
    # Output frame (vertical 9:16)
    frame_width: int = 1080
    frame_height: int = 1920
    
    # Artifact naming
    clip_prefix: str = "clip"
    overlay_prefix: str = "overlay"
    final_prefix: str = "final"


# Default configuration instance
DEFAULT_HIGHLIGHT_CONFIG = HighlightConfig()
