"""
Join synthesized chunks into one continuous dubbed track.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from pydub import AudioSegment

from .errors import IncompatibleChunkFormat
from .io_ffmpeg import ensure_dir
from .models import SynthesizedChunk

logger = logging.getLogger("segdub")


def _sample_format(clip: AudioSegment) -> tuple[int, int, int]:
    return clip.frame_rate, clip.channels, clip.sample_width


def concatenate_chunks(chunks: Sequence[SynthesizedChunk], out_wav: str | Path) -> AudioSegment:
    """Append chunks end to end in index order and export the result as wav.

    No cross-fade, padding or resampling is applied, so every chunk must
    share the first chunk's sample rate, channel count and sample width.
    """
    if not chunks:
        raise ValueError("No synthesized chunks to concatenate.")

    ordered = sorted(chunks, key=lambda c: c.index)
    indices = [c.index for c in ordered]
    if indices != list(range(indices[0], indices[0] + len(indices))):
        raise ValueError(f"Synthesized chunk indices are not contiguous: {indices}")

    track: AudioSegment | None = None
    expected: tuple[int, int, int] | None = None
    for chunk in ordered:
        clip = AudioSegment.from_wav(str(chunk.path))
        fmt = _sample_format(clip)
        if expected is None:
            expected, track = fmt, clip
            continue
        if fmt != expected:
            raise IncompatibleChunkFormat(
                f"chunk {chunk.index} is {fmt[0]} Hz/{fmt[1]} ch/{fmt[2] * 8}-bit, "
                f"expected {expected[0]} Hz/{expected[1]} ch/{expected[2] * 8}-bit"
            )
        track = track + clip

    ensure_dir(Path(out_wav).parent)
    track.export(str(out_wav), format="wav")
    logger.info(f"Concatenated {len(ordered)} chunk(s) -> {out_wav} ({len(track) / 1000:.1f}s)")
    return track
