#!/usr/bin/env python3
"""
CLI tool to turn a local workout recording into a highlight video.

Usage:
    python scripts/generate_highlight_cli.py <video_path> --punches N --seconds S [options]

Example:
    python scripts/generate_highlight_cli.py ~/Videos/round.mp4 --punches 137 --seconds 180 --streak 5
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hityourday.pipeline import HighlightGenerationError, HighlightPipeline, RoundStats


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s'
)
logger = logging.getLogger(__name__)


async def generate(video_path: Path, output_dir: Path, stats: RoundStats) -> dict:
    """
    Run the highlight pipeline on a local file.
    
    Args:
        video_path: Path to the recording
        output_dir: Directory for the final video
        stats: Round statistics for the overlay
        
    Returns:
        Run summary dictionary
    """
    if not video_path.exists():
        raise FileNotFoundError(f"Video not found: {video_path}")
    
    pipeline = HighlightPipeline(uploads_dir=output_dir, url_prefix=str(output_dir))
    run = await pipeline.run(video_path, stats)
    
    logger.info(f"Highlight written to: {run.final_path}")
    return run.to_dict()


def main():
    parser = argparse.ArgumentParser(
        description="Generate a HitYourDay highlight video from a recording",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Stats derived pace
    python scripts/generate_highlight_cli.py round.mp4 --punches 137 --seconds 180

    # Everything explicit
    python scripts/generate_highlight_cli.py round.mp4 --punches 137 --seconds 180 \\
        --pace 45.7 --top-speed 22.3 --streak 5 --output-dir ./highlights
        """
    )
    
    parser.add_argument("video_path", type=Path, help="Path to the workout recording")
    parser.add_argument("--punches", type=float, required=True, help="Punch count")
    parser.add_argument("--seconds", type=float, required=True, help="Round length in seconds")
    parser.add_argument("--pace", type=float, default=None, help="Punches per minute (derived if omitted)")
    parser.add_argument("--top-speed", type=float, default=None, help="Estimated top speed in mph")
    parser.add_argument("--streak", type=float, default=0, help="Current streak in days")
    parser.add_argument(
        "--output-dir", "-o",
        type=Path,
        default=Path("./highlight_output"),
        help="Output directory (default: ./highlight_output)"
    )
    
    args = parser.parse_args()
    
    stats = RoundStats.from_round(
        punch_count=args.punches,
        round_seconds=args.seconds,
        pace=args.pace,
        top_speed_estimate=args.top_speed,
        streak_days=args.streak,
    )
    
    try:
        summary = asyncio.run(generate(args.video_path, args.output_dir, stats))
        print(json.dumps(summary, indent=2))
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except HighlightGenerationError as e:
        logger.error(f"Highlight generation failed at {e.stage}: {e.__cause__}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
