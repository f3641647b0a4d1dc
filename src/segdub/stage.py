"""
Per-chunk dubbing: transcribe -> translate -> synthesize.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from tqdm import tqdm

from .errors import SpeechSynthesisFailed
from .models import AudioChunk, SynthesizedChunk
from .tts import write_silence

logger = logging.getLogger("segdub")

ProgressCallback = Callable[[int, int], None]
PhaseCallback = Callable[[AudioChunk, str], None]


class ChunkDubber:
    """Runs the three service calls for one chunk, strictly in order.

    ``transcribe(path, index)``, ``translate(text, index)`` and
    ``synthesize(text, out_path, index)`` are the bound service calls;
    see ``stt.make_transcriber``, ``translation.make_translator`` and
    ``tts.make_synth_openai``.
    """

    def __init__(
        self,
        transcribe: Callable[[Path, int], str],
        translate: Callable[[str, int], str],
        synthesize: Callable[[str, Path, int], None],
        out_dir: str | Path,
        empty_translation: str = "silence",
        on_phase: PhaseCallback | None = None,
    ):
        self.transcribe = transcribe
        self.translate = translate
        self.synthesize = synthesize
        self.out_dir = Path(out_dir)
        self.empty_translation = empty_translation
        self._on_phase = on_phase or (lambda *_: None)

    def output_path(self, chunk: AudioChunk) -> Path:
        return self.out_dir / f"tts_{chunk.path.name}"

    def dub(self, chunk: AudioChunk) -> SynthesizedChunk:
        self._on_phase(chunk, "transcribing")
        transcript = self.transcribe(chunk.path, chunk.index)
        logger.debug(f"Chunk {chunk.index} transcript: {transcript[:80]!r}")

        self._on_phase(chunk, "translating")
        translation = self.translate(transcript, chunk.index)

        self._on_phase(chunk, "synthesizing")
        out_path = self.output_path(chunk)
        if translation:
            self.synthesize(translation, out_path, chunk.index)
        elif self.empty_translation == "error":
            raise SpeechSynthesisFailed(
                None, "nothing to synthesize, translation is empty", chunk_index=chunk.index
            )
        else:
            logger.warning(
                f"Chunk {chunk.index}: empty translation, filling {chunk.duration_ms / 1000:.1f}s with silence"
            )
            write_silence(out_path, chunk.duration_ms)

        return SynthesizedChunk(
            index=chunk.index, path=out_path, transcript=transcript, translation=translation
        )


def dub_chunks(
    dubber: ChunkDubber,
    chunks: Sequence[AudioChunk],
    on_progress: ProgressCallback | None = None,
) -> list[SynthesizedChunk]:
    """Dub chunks one after another; chunk i+1 starts once chunk i is on disk."""
    total = len(chunks)
    results: list[SynthesizedChunk] = []
    for chunk in tqdm(chunks, desc="Dubbing chunks"):
        results.append(dubber.dub(chunk))
        if on_progress:
            on_progress(len(results), total)
    return results


async def dub_chunks_async(
    dubber: ChunkDubber,
    chunks: Sequence[AudioChunk],
    max_concurrent: int = 2,
    on_progress: ProgressCallback | None = None,
) -> list[SynthesizedChunk]:
    """Dub up to ``max_concurrent`` chunks at once; result is in index order.

    The first failure cancels every chunk that has not finished yet.
    """
    semaphore = asyncio.Semaphore(max_concurrent)
    total = len(chunks)
    completed = 0
    pbar = tqdm(total=total, desc="Dubbing chunks (async)")

    async def process_single(chunk: AudioChunk) -> SynthesizedChunk:
        nonlocal completed
        async with semaphore:
            result = await asyncio.to_thread(dubber.dub, chunk)
        completed += 1
        pbar.update(1)
        if on_progress:
            on_progress(completed, total)
        return result

    tasks = [asyncio.create_task(process_single(c)) for c in chunks]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        # Collect the failures of chunks that were already in flight too
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    finally:
        pbar.close()
    return sorted(results, key=lambda s: s.index)


def dub_all(
    dubber: ChunkDubber,
    chunks: Sequence[AudioChunk],
    max_concurrent: int = 1,
    on_progress: ProgressCallback | None = None,
) -> list[SynthesizedChunk]:
    """Sequential by default; a bounded worker pool when ``max_concurrent > 1``."""
    if max_concurrent <= 1 or len(chunks) <= 1:
        return dub_chunks(dubber, chunks, on_progress)
    logger.info(f"Dubbing {len(chunks)} chunks with up to {max_concurrent} in flight")
    return asyncio.run(dub_chunks_async(dubber, chunks, max_concurrent, on_progress))
