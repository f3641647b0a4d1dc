"""
Audio and video processing utilities using ffmpeg/ffprobe.

This is the only module that talks to the media engine: extracting the
normalized audio track and muxing the dubbed track back onto the picture.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from .config import EXTRACT_SAMPLE_RATE
from .errors import DubbingError, ExtractionFailed, MuxingFailed

logger = logging.getLogger("segdub")

# Video/audio codecs per output container
_REMUX_CODECS: dict[str, list[str]] = {
    "webm": ["-c:v", "libvpx", "-crf", "32", "-b:v", "0", "-c:a", "libopus"],
    "mp4": ["-c:v", "libx264", "-crf", "23", "-preset", "medium", "-c:a", "aac"],
}


def run(cmd: list[str], *, check: bool = True, error: type[DubbingError] = DubbingError) -> str:
    """Run a command and return its combined stdout/stderr."""
    logger.debug("Running: %s", " ".join(map(str, cmd)))
    proc = subprocess.run(
        cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, check=False
    )
    if proc.returncode != 0 and check:
        logger.error("Command failed with code %d: %s", proc.returncode, proc.stdout)
        tail = proc.stdout.strip().splitlines()[-1:] or [""]
        raise error(f"{cmd[0]} exited with code {proc.returncode}: {tail[0]}")
    return proc.stdout


def ensure_dir(path: str | Path) -> None:
    """Ensure directory exists."""
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def extract_audio(
    input_video: str | Path, out_wav: str | Path, sample_rate: int = EXTRACT_SAMPLE_RATE
) -> None:
    """Extract a mono PCM track from any container."""
    ensure_dir(Path(out_wav).parent)
    cmd = [
        "ffmpeg",
        "-y",
        "-i",
        str(input_video),
        "-vn",
        "-acodec",
        "pcm_s16le",
        "-ar",
        str(sample_rate),
        "-ac",
        "1",
        str(out_wav),
    ]
    run(cmd, error=ExtractionFailed)


def remux_audio_to_video(
    input_video: str | Path, audio_wav: str | Path, output_video: str | Path, container: str = "webm"
) -> None:
    """Replace the audio of a video; output stops at the shorter stream."""
    ensure_dir(Path(output_video).parent)
    cmd = [
        "ffmpeg",
        "-y",
        "-i",
        str(input_video),
        "-i",
        str(audio_wav),
        "-map",
        "0:v:0",
        "-map",
        "1:a:0",
        *_REMUX_CODECS[container],
        "-shortest",
        str(output_video),
    ]
    run(cmd, error=MuxingFailed)


def get_media_duration_ms(path: str | Path) -> int:
    """Get media duration in milliseconds (0 if ffprobe can't tell)."""
    out = run(
        [
            "ffprobe",
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(path),
        ],
        check=False,
    )
    try:
        seconds = float(out.strip())
    except ValueError:
        seconds = 0.0
    return int(seconds * 1000)


class FFmpegTranscoder:
    """Transcoding adapter backed by the ffmpeg command-line tools."""

    binaries = ("ffmpeg", "ffprobe")

    def check_available(self) -> None:
        missing = [b for b in self.binaries if shutil.which(b) is None]
        if missing:
            raise ExtractionFailed(f"media engine not found on PATH: {', '.join(missing)}")

    def extract_audio(self, source: Path, out_wav: Path) -> None:
        extract_audio(source, out_wav)

    def remux(self, source: Path, dubbed_wav: Path, output: Path, container: str) -> None:
        remux_audio_to_video(source, dubbed_wav, output, container=container)

    def duration_ms(self, path: Path) -> int:
        return get_media_duration_ms(path)
