"""
Command-line interface for the segmented dubbing pipeline.
"""

import argparse
import logging
import pathlib
import sys

from dotenv import load_dotenv

from .config import (
    DEFAULT_CHUNK_SECONDS,
    DEFAULT_MAX_MINUTES,
    EMPTY_TRANSLATION_POLICIES,
    LANGUAGES,
    MAX_MINUTES,
    MIN_MINUTES,
    OUTPUT_FORMATS,
    VOICE_PRESETS,
    Credential,
    DubbingConfig,
)
from .errors import DubbingError
from .models import RunStatus
from .pipeline import DubbingPipeline

logger = logging.getLogger("segdub")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    # The SDK's HTTP client is chatty at DEBUG and echoes request headers
    logging.getLogger("httpx").setLevel(logging.WARNING)


def minutes(value: str) -> int:
    """argparse type for --max-minutes."""
    n = int(value)
    if not MIN_MINUTES <= n <= MAX_MINUTES:
        raise argparse.ArgumentTypeError(f"must be between {MIN_MINUTES} and {MAX_MINUTES}")
    return n


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Dub a video into another language, chunk by chunk")

    # IO
    ap.add_argument("--input_video", required=True, help="Source video (MP4/WebM)")
    ap.add_argument("--output", default=None, help="Output video path (default: dubbed.<format>)")
    ap.add_argument(
        "--workdir",
        default=".work",
        help="Scratch directory; its segdub-run/ subdirectory is wiped at every run",
    )
    ap.add_argument(
        "--keep-workdir", action="store_true", help="Keep intermediate files after the run"
    )

    # Dubbing options
    ap.add_argument("--target-language", choices=list(LANGUAGES), default="es")
    ap.add_argument("--voice", choices=list(VOICE_PRESETS), default=VOICE_PRESETS[0])
    ap.add_argument(
        "--max-minutes",
        type=minutes,
        default=DEFAULT_MAX_MINUTES,
        help="Only dub this many minutes from the start of the video",
    )
    ap.add_argument("--chunk-seconds", type=int, default=DEFAULT_CHUNK_SECONDS)
    ap.add_argument("--output-format", choices=list(OUTPUT_FORMATS), default="webm")
    ap.add_argument(
        "--empty-translation",
        choices=list(EMPTY_TRANSLATION_POLICIES),
        default="silence",
        help="silence: keep the chunk as silence; error: fail the run",
    )

    # Models
    ap.add_argument("--whisper-model", default="whisper-1")
    ap.add_argument("--translation-model", default="gpt-4o-mini")
    ap.add_argument("--tts-model", default="gpt-4o-mini-tts")

    # Processing
    ap.add_argument(
        "--max-concurrent",
        type=int,
        default=1,
        help="Chunks dubbed at once (1 = strictly sequential)",
    )
    ap.add_argument(
        "--request-timeout", type=float, default=120.0, help="Per-request timeout in seconds"
    )

    # Logging
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return ap.parse_args(argv)


def build_config(args: argparse.Namespace) -> DubbingConfig:
    return DubbingConfig(
        target_language=args.target_language,
        voice=args.voice,
        max_minutes=args.max_minutes,
        chunk_seconds=args.chunk_seconds,
        transcription_model=args.whisper_model,
        translation_model=args.translation_model,
        tts_model=args.tts_model,
        output_format=args.output_format,
        empty_translation=args.empty_translation,
        max_concurrent=args.max_concurrent,
        request_timeout=args.request_timeout,
        keep_workdir=args.keep_workdir,
    )


def log_status(status: RunStatus) -> None:
    logger.debug(f"[{status.progress:3d}%] {status.describe()}")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    # Load environment variables from .env file
    # Look for .env in the project root (parent of src directory)
    project_root = pathlib.Path(__file__).parent.parent.parent
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        # Fallback: try loading from current directory
        load_dotenv()

    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error(str(e))
        return 2

    pipeline = DubbingPipeline(config, workdir=args.workdir, on_status=log_status)
    try:
        artifact = pipeline.run(args.input_video, Credential.from_env(), output=args.output)
    except DubbingError as e:
        print(f"FAILED [{e.stage}] {e.detail or type(e).__name__}", file=sys.stderr)
        return 1

    logger.info(
        f"Dubbed {artifact.used_chunks} chunk(s) "
        f"({artifact.dubbed_duration_ms / 1000:.1f}s of speech, {artifact.dropped_chunks} dropped) "
        f"-> {artifact.path} ({artifact.duration_ms / 1000:.1f}s long)"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
