"""
Data models for the segmented dubbing pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class Step(str, Enum):
    """Pipeline status, in the order a run walks through them."""

    IDLE = "idle"
    PREPARING = "preparing"
    EXTRACTING = "extracting"
    SEGMENTING = "segmenting"
    TRANSCRIBING = "transcribing"
    CONCATENATING = "concatenating"
    MUXING = "muxing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_active(self) -> bool:
        return self not in (Step.IDLE, Step.DONE, Step.FAILED)


# Forward order of a successful run; FAILED may be entered from any active step.
STEP_ORDER: tuple[Step, ...] = (
    Step.IDLE,
    Step.PREPARING,
    Step.EXTRACTING,
    Step.SEGMENTING,
    Step.TRANSCRIBING,
    Step.CONCATENATING,
    Step.MUXING,
    Step.DONE,
)


@dataclass(frozen=True)
class SourceMedia:
    """The uploaded video; its container is inferred from the filename."""

    path: Path

    @property
    def container(self) -> str:
        return "webm" if self.path.name.lower().endswith(".webm") else "mp4"

    @property
    def staged_name(self) -> str:
        """Name the file gets inside the working area."""
        return f"input.{self.container}"


@dataclass(frozen=True)
class AudioChunk:
    """A bounded-duration slice of the normalized audio track."""

    index: int  # 0-based playback position
    path: Path
    duration_ms: int


@dataclass(frozen=True)
class SynthesizedChunk:
    """Dubbed speech for one AudioChunk, carrying the same index."""

    index: int
    path: Path
    transcript: str
    translation: str


@dataclass(frozen=True)
class DubbedArtifact:
    """The final muxed video produced by a successful run."""

    path: Path
    container: str
    used_chunks: int
    dropped_chunks: int
    dubbed_duration_ms: int  # length of the concatenated speech track
    duration_ms: int  # length of the muxed video, as probed


@dataclass(frozen=True)
class RunStatus:
    """Snapshot of the orchestrator state handed to status listeners."""

    step: Step
    detail: str
    progress: int  # percent, 0..100
    error: Exception | None = None
    artifact: DubbedArtifact | None = None
    failed_at: Step | None = None  # step that was active when the run failed

    def describe(self) -> str:
        text = self.step.value.upper()
        return f"{text} - {self.detail}" if self.detail else text
