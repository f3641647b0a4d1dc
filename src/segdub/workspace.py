"""
Working storage area for one pipeline run.

The pipeline never wipes the user's ``--workdir`` itself, only the
``segdub-run`` directory it owns inside it.
"""

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from .io_ffmpeg import ensure_dir

logger = logging.getLogger("segdub")

RUN_DIRNAME = "segdub-run"


@dataclass(frozen=True)
class WorkingArea:
    """Fixed file layout of a run's scratch directory."""

    root: Path

    @classmethod
    def inside(cls, workdir: str | Path) -> "WorkingArea":
        """The area a pipeline owns under ``workdir``."""
        return cls(Path(workdir) / RUN_DIRNAME)

    @property
    def audio_wav(self) -> Path:
        return self.root / "audio.wav"

    @property
    def segments_dir(self) -> Path:
        return self.root / "segments"

    @property
    def tts_dir(self) -> Path:
        return self.root / "tts"

    @property
    def dubbed_wav(self) -> Path:
        return self.root / "dubbed.wav"

    def staged_input(self, name: str) -> Path:
        return self.root / name

    def contains(self, path: str | Path) -> bool:
        """True when ``path`` would be removed together with the area."""
        return Path(path).resolve().is_relative_to(self.root.resolve())

    def reset(self) -> None:
        """Remove everything left by a previous run and recreate the layout."""
        if self.root.exists():
            logger.debug("Clearing working area %s", self.root)
            shutil.rmtree(self.root)
        for d in (self.root, self.segments_dir, self.tts_dir):
            ensure_dir(d)

    def discard(self) -> None:
        shutil.rmtree(self.root, ignore_errors=True)


@contextmanager
def acquire_working_area(area: WorkingArea, *, keep: bool = False) -> Iterator[WorkingArea]:
    """Reset the working area for a run and release it when the run ends.

    On release the scratch files are removed unless ``keep`` is set; a kept
    area is wiped anyway by the next acquisition.
    """
    area.reset()
    try:
        yield area
    finally:
        if keep:
            logger.info(f"Keeping working files in {area.root}")
        else:
            area.discard()
