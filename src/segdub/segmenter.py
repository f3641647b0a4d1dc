"""
Split the normalized audio track into fixed-duration chunks.
"""

import logging
from pathlib import Path

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .config import DEFAULT_CHUNK_SECONDS
from .errors import ExtractionFailed, NoSegmentsProduced
from .io_ffmpeg import ensure_dir
from .models import AudioChunk

logger = logging.getLogger("segdub")


def chunk_filename(index: int) -> str:
    """Zero-padded so that listing order equals playback order."""
    return f"seg_{index:03d}.wav"


def segment_audio(
    track_path: str | Path,
    out_dir: str | Path,
    chunk_seconds: int = DEFAULT_CHUNK_SECONDS,
) -> list[AudioChunk]:
    """Cut ``track_path`` into ``chunk_seconds`` slices written under ``out_dir``.

    The last chunk keeps whatever remains and may be shorter. Chunks are
    returned in index order; callers never need to re-derive order from
    the directory listing.

    Raises:
        ExtractionFailed: the track is not a readable WAV file.
        NoSegmentsProduced: the track is empty or pure digital silence.
    """
    # Parse the WAV directly; from_wav would fall back to an ffmpeg decode
    try:
        track = AudioSegment(data=Path(track_path).read_bytes())
    except CouldntDecodeError as e:
        raise ExtractionFailed(f"normalized audio track is not valid WAV: {track_path}") from e
    total_ms = len(track)
    if total_ms == 0 or track.max == 0:
        raise NoSegmentsProduced(
            f"normalized audio track is {'empty' if total_ms == 0 else 'silent'}: {track_path}"
        )

    ensure_dir(out_dir)
    step_ms = chunk_seconds * 1000
    chunks: list[AudioChunk] = []
    for index, start_ms in enumerate(range(0, total_ms, step_ms)):
        piece = track[start_ms : start_ms + step_ms]
        path = Path(out_dir) / chunk_filename(index)
        piece.export(str(path), format="wav")
        chunks.append(AudioChunk(index=index, path=path, duration_ms=len(piece)))

    logger.info(
        f"Segmented {total_ms / 1000:.1f}s of audio into {len(chunks)} chunk(s) of {chunk_seconds}s"
    )
    return chunks
