"""Highlight pipeline runner.

Turns an uploaded workout recording into a branded vertical highlight:
probe -> select window -> extract -> render overlay -> composite -> publish.

Stages run strictly in order from a single transition table. Every artifact
is acquired in a scope that removes it on exit; only the final video
survives a successful run, nothing survives a failed one.
"""
import asyncio
import enum
import logging
import random
import time
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Type

from hityourday.config import settings
from .backends import FFprobeProber, FFmpegTranscoder, PillowRenderer
from .config import HighlightConfig, DEFAULT_HIGHLIGHT_CONFIG
from .errors import (
    HighlightError,
    ExtractionFailed,
    RenderFailed,
    CompositionFailed,
    HighlightGenerationError,
)
from .interfaces import Prober, Transcoder, RasterRenderer
from .stats import RoundStats
from .window import ClipWindow, select_window

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    """Pipeline state enumeration."""
    PROBING = "probing"
    WINDOW_SELECTED = "window_selected"
    EXTRACTED = "extracted"
    OVERLAY_RENDERED = "overlay_rendered"
    COMPOSITED = "composited"
    DONE = "done"
    FAILED = "failed"


class SourceUnavailable(HighlightError):
    """The source recording is missing at pipeline start."""
    stage = "probe"


class PublishFailed(HighlightError):
    """The final video was not produced where expected."""
    stage = "publish"


# state -> (next state, stage handler, error raised when the handler fails)
TRANSITIONS: Dict[PipelineState, Tuple[PipelineState, str, Type[HighlightError]]] = {
    PipelineState.PROBING: (PipelineState.WINDOW_SELECTED, "_probe_and_select", SourceUnavailable),
    PipelineState.WINDOW_SELECTED: (PipelineState.EXTRACTED, "_extract", ExtractionFailed),
    PipelineState.EXTRACTED: (PipelineState.OVERLAY_RENDERED, "_render", RenderFailed),
    PipelineState.OVERLAY_RENDERED: (PipelineState.COMPOSITED, "_composite", CompositionFailed),
    PipelineState.COMPOSITED: (PipelineState.DONE, "_publish", PublishFailed),
}


def _discard(path: Path) -> None:
    """Best-effort delete; failures are logged, never raised."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Cleanup failed for {path}: {e}")


@contextmanager
def intermediate_artifact(path: Path):
    """Scope for a file that must not outlive the run."""
    try:
        yield path
    finally:
        _discard(path)


@contextmanager
def final_artifact(path: Path):
    """Scope for the deliverable: removed only if the run fails."""
    try:
        yield path
    except BaseException:
        _discard(path)
        raise


# Timestamps of in-flight runs in this process
_claimed_timestamps: Set[int] = set()


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class HighlightRun:
    """Inspectable record of one pipeline invocation."""
    timestamp: int
    source_path: Path
    clip_path: Path
    overlay_path: Path
    final_path: Path
    public_url: str
    state: PipelineState = PipelineState.PROBING
    history: List[PipelineState] = field(default_factory=list)
    duration: Optional[float] = None
    window: Optional[ClipWindow] = None
    failed_stage: Optional[str] = None
    
    def advance(self, state: PipelineState):
        self.history.append(self.state)
        self.state = state
    
    def fail(self, stage: str):
        self.history.append(self.state)
        self.state = PipelineState.FAILED
        self.failed_stage = stage
    
    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "state": self.state.value,
            "history": [s.value for s in self.history],
            "duration": self.duration,
            "window": self.window.to_dict() if self.window else None,
            "failed_stage": self.failed_stage,
            "public_url": self.public_url if self.state is PipelineState.DONE else None,
        }


class HighlightPipeline:
    """Generates one highlight video per call to run()."""
    
    def __init__(
        self,
        uploads_dir: Optional[Path] = None,
        url_prefix: Optional[str] = None,
        prober: Optional[Prober] = None,
        transcoder: Optional[Transcoder] = None,
        renderer: Optional[RasterRenderer] = None,
        config: Optional[HighlightConfig] = None,
        clock: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or DEFAULT_HIGHLIGHT_CONFIG
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir)
        self.url_prefix = (url_prefix or settings.uploads_url_prefix).rstrip("/")
        self.prober = prober or FFprobeProber()
        self.transcoder = transcoder or FFmpegTranscoder()
        self.renderer = renderer or PillowRenderer(self.config)
        self.clock = clock or _now_ms
        self.rng = rng
    
    def _artifact_paths(self, timestamp: int) -> Tuple[Path, Path, Path]:
        return (
            self.uploads_dir / f"{self.config.clip_prefix}_{timestamp}.mp4",
            self.uploads_dir / f"{self.config.overlay_prefix}_{timestamp}.png",
            self.uploads_dir / f"{self.config.final_prefix}_{timestamp}.mp4",
        )
    
    def _free_timestamp(self) -> int:
        """Clock value not claimed by a running invocation nor used on disk."""
        timestamp = self.clock()
        while timestamp in _claimed_timestamps or any(
            p.exists() for p in self._artifact_paths(timestamp)
        ):
            timestamp += 1
        return timestamp
    
    def new_run(self, source_path: Path) -> HighlightRun:
        """Capture the run timestamp and derive every artifact name from it."""
        timestamp = self._free_timestamp()
        clip_path, overlay_path, final_path = self._artifact_paths(timestamp)
        return HighlightRun(
            timestamp=timestamp,
            source_path=Path(source_path),
            clip_path=clip_path,
            overlay_path=overlay_path,
            final_path=final_path,
            public_url=f"{self.url_prefix}/{final_path.name}",
        )
    
    async def run(self, source_path: str | Path, stats: RoundStats) -> HighlightRun:
        """
        Run every stage once.
        
        Args:
            source_path: Uploaded recording (caller deletes it afterwards)
            stats: Round statistics for the overlay
            
        Returns:
            The completed HighlightRun
            
        Raises:
            HighlightGenerationError: If any stage fails
        """
        run = self.new_run(Path(source_path))
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        
        logger.info(f"Highlight {run.timestamp}: starting for {run.source_path}")
        
        _claimed_timestamps.add(run.timestamp)
        try:
            await self._run_stages(run, stats)
        finally:
            _claimed_timestamps.discard(run.timestamp)
        
        logger.info(f"Highlight {run.timestamp}: ready at {run.public_url}")
        return run
    
    async def _run_stages(self, run: HighlightRun, stats: RoundStats):
        with ExitStack() as artifacts:
            try:
                while run.state is not PipelineState.DONE:
                    next_state, handler_name, error_cls = TRANSITIONS[run.state]
                    handler = getattr(self, handler_name)
                    try:
                        await handler(run, stats, artifacts)
                    except HighlightError:
                        raise
                    except Exception as e:
                        raise error_cls(str(e)) from e
                    run.advance(next_state)
                    logger.info(f"Highlight {run.timestamp}: {run.state.value}")
            except HighlightError as e:
                run.fail(e.stage)
                logger.error(
                    f"Highlight {run.timestamp} failed at {e.stage}: {e}",
                    exc_info=True
                )
                raise HighlightGenerationError(e.stage) from e
    
    async def _probe_and_select(self, run: HighlightRun, stats: RoundStats, artifacts: ExitStack):
        if not run.source_path.is_file():
            raise SourceUnavailable(f"Source recording not found: {run.source_path}")
        
        try:
            run.duration = await self.prober.duration(run.source_path)
        except Exception as e:
            # Unknown duration falls back to a window at 0
            logger.warning(f"Highlight {run.timestamp}: duration unknown, probe failed: {e}")
            run.duration = None
        run.window = select_window(run.duration, self.config.clip_seconds, self.rng)
        
        logger.debug(
            f"Highlight {run.timestamp}: duration={run.duration} "
            f"window={run.window.start_sec:.2f}+{run.window.length_sec:.1f}s"
        )
    
    async def _extract(self, run: HighlightRun, stats: RoundStats, artifacts: ExitStack):
        clip_path = artifacts.enter_context(intermediate_artifact(run.clip_path))
        await self.transcoder.extract(run.source_path, run.window, clip_path)
    
    async def _render(self, run: HighlightRun, stats: RoundStats, artifacts: ExitStack):
        overlay_path = artifacts.enter_context(intermediate_artifact(run.overlay_path))
        await asyncio.to_thread(self.renderer.render, stats, overlay_path)
    
    async def _composite(self, run: HighlightRun, stats: RoundStats, artifacts: ExitStack):
        final_path = artifacts.enter_context(final_artifact(run.final_path))
        await self.transcoder.composite(
            run.clip_path,
            run.overlay_path,
            final_path,
            self.config.frame_width,
            self.config.frame_height,
        )
    
    async def _publish(self, run: HighlightRun, stats: RoundStats, artifacts: ExitStack):
        if not run.final_path.is_file():
            raise PublishFailed(f"Final video missing: {run.final_path}")


_default_pipeline: Optional[HighlightPipeline] = None


async def generate_highlight(source_path: str | Path, stats: RoundStats) -> str:
    """
    Generate a highlight video and return its public URL.
    
    Raises:
        HighlightGenerationError: If generation fails; no artifacts remain
    """
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = HighlightPipeline()
    
    run = await _default_pipeline.run(source_path, stats)
    return run.public_url
