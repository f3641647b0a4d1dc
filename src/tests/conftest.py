"""
Shared fixtures: WAV builders, a fake OpenAI client and a fake transcoder.
"""

import io
import shutil
import threading
from pathlib import Path
from types import SimpleNamespace

import httpx
import openai
import pytest
from pydub import AudioSegment
from pydub.generators import Sine


def tone(seconds: float, frame_rate: int = 16000) -> AudioSegment:
    """Audible mono tone of the given length (built from a 1s period for speed)."""
    one_sec = Sine(440, sample_rate=frame_rate).to_audio_segment(duration=1000, volume=-6.0)
    one_sec = one_sec.set_channels(1).set_sample_width(2)
    whole = int(seconds) + 1
    return (one_sec * whole)[: int(seconds * 1000)]


def write_wav(path: Path, seconds: float, frame_rate: int = 16000, silent: bool = False) -> Path:
    if silent:
        clip = AudioSegment.silent(duration=int(seconds * 1000), frame_rate=frame_rate)
    else:
        clip = tone(seconds, frame_rate)
    path.parent.mkdir(parents=True, exist_ok=True)
    clip.export(str(path), format="wav")
    return path


def wav_bytes(seconds: float, frame_rate: int = 24000) -> bytes:
    buf = io.BytesIO()
    AudioSegment.silent(duration=int(seconds * 1000), frame_rate=frame_rate).export(buf, format="wav")
    return buf.getvalue()


def status_error(status: int, url: str = "https://api.openai.com/v1/test") -> openai.APIStatusError:
    request = httpx.Request("POST", url)
    response = httpx.Response(status, request=request, json={"error": {"message": "rejected"}})
    return openai.APIStatusError("rejected", response=response, body=None)


class FakeOpenAI:
    """Stands in for ``openai.OpenAI`` with scripted responses.

    ``fail`` maps an endpoint ("transcribe", "translate", "speech") to a
    ``(call_number, status)`` pair: that 1-based call raises an API error.
    """

    def __init__(
        self,
        translation: str | None = "hola mundo",
        tts_seconds: float = 60.0,
        tts_frame_rate: int = 24000,
        fail: dict[str, tuple[int, int]] | None = None,
    ):
        self.translation = translation
        self.tts_seconds = tts_seconds
        self.tts_frame_rate = tts_frame_rate
        self.fail = fail or {}
        self.calls: dict[str, list] = {"transcribe": [], "translate": [], "speech": []}
        self._lock = threading.Lock()

        self.audio = SimpleNamespace(
            transcriptions=SimpleNamespace(create=self._transcribe),
            speech=SimpleNamespace(create=self._speech),
        )
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))

    def _record(self, endpoint: str, payload) -> None:
        with self._lock:
            self.calls[endpoint].append(payload)
            n = len(self.calls[endpoint])
        if endpoint in self.fail and self.fail[endpoint][0] == n:
            raise status_error(self.fail[endpoint][1])

    def _transcribe(self, *, model, file, response_format):
        name = Path(file.name).name
        self._record("transcribe", {"model": model, "file": name, "format": response_format})
        return f"  transcript of {name}\n"

    def _chat(self, *, model, messages, temperature):
        self._record("translate", {"model": model, "messages": messages, "temperature": temperature})
        message = SimpleNamespace(content=self.translation)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def _speech(self, *, model, voice, input, response_format):
        self._record(
            "speech", {"model": model, "voice": voice, "input": input, "format": response_format}
        )
        return SimpleNamespace(content=wav_bytes(self.tts_seconds, self.tts_frame_rate))


class FakeTranscoder:
    """Transcoding adapter that fabricates the extracted track and copies on remux.

    ``video_seconds`` is the length of the picture stream; the probed output
    is cut to the shorter stream the way ``-shortest`` does.
    """

    def __init__(
        self, audio_seconds: float = 150.0, silent: bool = False, video_seconds: float | None = None
    ):
        self.audio_seconds = audio_seconds
        self.silent = silent
        self.video_seconds = audio_seconds if video_seconds is None else video_seconds
        self.remuxed: list[tuple[Path, Path, Path, str]] = []

    def check_available(self) -> None:
        pass

    def extract_audio(self, source: Path, out_wav: Path) -> None:
        assert source.exists()
        write_wav(out_wav, self.audio_seconds, silent=self.silent)

    def remux(self, source: Path, dubbed_wav: Path, output: Path, container: str) -> None:
        self.remuxed.append((source, dubbed_wav, output, container))
        shutil.copyfile(dubbed_wav, output)

    def duration_ms(self, path: Path) -> int:
        return min(len(AudioSegment.from_wav(str(path))), int(self.video_seconds * 1000))


@pytest.fixture
def source_video(tmp_path: Path) -> Path:
    path = tmp_path / "talk.mp4"
    path.write_bytes(b"\x00\x00\x00\x18ftypmp42 not really a video")
    return path
