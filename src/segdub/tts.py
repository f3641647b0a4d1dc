"""
Text-to-speech synthesis with OpenAI.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from openai import OpenAI
from pydub import AudioSegment

from .client import service_errors
from .config import SYNTH_CHANNELS, SYNTH_SAMPLE_RATE, SYNTH_SAMPLE_WIDTH
from .errors import SpeechSynthesisFailed

logger = logging.getLogger("segdub")


def tts_speak_openai(
    client: OpenAI,
    text: str,
    model: str,
    voice: str,
    out_path: str | Path,
    chunk_index: int | None = None,
) -> None:
    """Synthesize speech using OpenAI TTS and write it as wav."""
    with service_errors(SpeechSynthesisFailed, chunk_index):
        resp = client.audio.speech.create(
            model=model,
            voice=voice,
            input=text,
            response_format="wav",
        )
    with open(out_path, "wb") as f:
        f.write(resp.content)


def write_silence(out_path: str | Path, duration_ms: int) -> None:
    """Write a silent clip in the same format the synthesizer produces."""
    clip = (
        AudioSegment.silent(duration=duration_ms, frame_rate=SYNTH_SAMPLE_RATE)
        .set_channels(SYNTH_CHANNELS)
        .set_sample_width(SYNTH_SAMPLE_WIDTH)
    )
    clip.export(str(out_path), format="wav")


def make_synth_openai(client: OpenAI, tts_model: str, voice: str) -> Callable[[str, Path, int], None]:
    """Create OpenAI TTS synthesis function."""

    def _synth(text: str, out_path: Path, chunk_index: int) -> None:
        tts_speak_openai(client, text, tts_model, voice, out_path, chunk_index=chunk_index)

    return _synth
