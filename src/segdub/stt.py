"""
Speech-to-text transcription with the OpenAI Whisper API.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from openai import OpenAI

from .client import service_errors
from .errors import TranscriptionFailed

logger = logging.getLogger("segdub")


def transcribe_whisper_api(
    client: OpenAI,
    wav_path: str | Path,
    model: str = "whisper-1",
    chunk_index: int | None = None,
) -> str:
    """Transcribe one audio chunk to plain text (language auto-detected)."""
    with open(wav_path, "rb") as f, service_errors(TranscriptionFailed, chunk_index):
        logger.debug(f"Transcribing {Path(wav_path).name} with {model} …")
        resp = client.audio.transcriptions.create(
            model=model,
            file=f,
            response_format="text",
        )

    # The SDK hands back a bare string for text responses, an object otherwise
    text = resp if isinstance(resp, str) else getattr(resp, "text", None)
    if text is None and isinstance(resp, dict):
        text = resp.get("text", "")
    return str(text or "").strip()


def make_transcriber(client: OpenAI, model: str) -> Callable[[Path, int], str]:
    """Create transcription function bound to a client and model."""

    def _transcribe(wav_path: Path, chunk_index: int) -> str:
        return transcribe_whisper_api(client, wav_path, model=model, chunk_index=chunk_index)

    return _transcribe
