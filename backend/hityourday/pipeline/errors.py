"""Highlight pipeline errors."""


class HighlightError(Exception):
    """Base class for fatal stage errors."""
    stage = "unknown"


class ExtractionFailed(HighlightError):
    """The sub-clip could not be transcoded."""
    stage = "extract"


class RenderFailed(HighlightError):
    """The statistics overlay could not be rendered."""
    stage = "render"


class CompositionFailed(HighlightError):
    """The overlay could not be burned into the clip."""
    stage = "composite"


class HighlightGenerationError(Exception):
    """
    Opaque failure returned to callers of the pipeline.
    
    The failing stage is kept for diagnostics; the underlying error is
    available as ``__cause__``.
    """
    
    def __init__(self, stage: str):
        super().__init__("Highlight generation failed")
        self.stage = stage
