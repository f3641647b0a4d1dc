"""
Pipeline orchestration: drives one dubbing run from source video to artifact.

A run walks ``idle -> preparing -> extracting -> segmenting -> transcribing
-> concatenating -> muxing -> done`` and never goes backwards. Any error
ends it in ``failed`` with the originating exception attached; nothing is
retried and no artifact is produced. A finished or failed pipeline can be
run again, which wipes the working area first.
"""

import logging
import shutil
import threading
from collections.abc import Callable
from pathlib import Path

from openai import OpenAI

from .assembler import concatenate_chunks
from .budget import apply_budget
from .client import make_openai_client
from .config import Credential, DubbingConfig, get_language_name
from .errors import (
    DubbingError,
    ExtractionFailed,
    MissingCredential,
    MuxingFailed,
    NoInputMedia,
    RunAlreadyInProgress,
    WorkingAreaConflict,
)
from .io_ffmpeg import FFmpegTranscoder, ensure_dir
from .models import STEP_ORDER, AudioChunk, DubbedArtifact, RunStatus, SourceMedia, Step
from .segmenter import segment_audio
from .stage import ChunkDubber, dub_all
from .stt import make_transcriber
from .translation import make_translator
from .tts import make_synth_openai
from .workspace import WorkingArea, acquire_working_area

logger = logging.getLogger("segdub")

StatusCallback = Callable[[RunStatus], None]
ClientFactory = Callable[[Credential, float], OpenAI]


class DubbingPipeline:
    """Orchestrates dubbing runs and tracks their status."""

    def __init__(
        self,
        config: DubbingConfig | None = None,
        workdir: str | Path = ".work",
        transcoder: FFmpegTranscoder | None = None,
        client_factory: ClientFactory = make_openai_client,
        on_status: StatusCallback | None = None,
    ):
        self.config = config or DubbingConfig()
        self.workdir = Path(workdir)
        self.transcoder = transcoder or FFmpegTranscoder()
        self._client_factory = client_factory
        self._on_status = on_status or (lambda _status: None)
        self._run_lock = threading.Lock()

        self._step = Step.IDLE
        self._detail = ""
        self._progress = 0
        self._error: Exception | None = None
        self._artifact: DubbedArtifact | None = None
        self._failed_at: Step | None = None

    # ── Status ──────────────────────────────────────────────────────────
    @property
    def status(self) -> RunStatus:
        return RunStatus(
            step=self._step,
            detail=self._detail,
            progress=self._progress,
            error=self._error,
            artifact=self._artifact,
            failed_at=self._failed_at,
        )

    @property
    def artifact(self) -> DubbedArtifact | None:
        """Only set once a run reached ``done``."""
        return self._artifact

    @property
    def is_running(self) -> bool:
        return self._step.is_active

    def _emit(self) -> None:
        self._on_status(self.status)

    def _advance(self, step: Step, detail: str = "", progress: int = 0) -> None:
        if STEP_ORDER.index(step) <= STEP_ORDER.index(self._step):
            raise RuntimeError(f"Illegal status transition {self._step.value} -> {step.value}")
        logger.info(f"{step.value.upper()}: {detail}" if detail else step.value.upper())
        self._step = step
        self._detail = detail
        self._progress = progress
        self._emit()

    def _update(self, detail: str | None = None, progress: int | None = None) -> None:
        if detail is not None:
            self._detail = detail
        if progress is not None:
            self._progress = max(self._progress, min(100, progress))
        self._emit()

    def _fail(self, error: Exception) -> None:
        self._failed_at = self._step
        self._step = Step.FAILED
        self._error = error
        self._detail = str(error)
        self._emit()

    # ── Run ─────────────────────────────────────────────────────────────
    def run(
        self,
        source: str | Path | None,
        credential: Credential,
        output: str | Path | None = None,
    ) -> DubbedArtifact:
        """Dub ``source`` and return the muxed artifact.

        Raises:
            RunAlreadyInProgress: another run on this pipeline is active;
                the active run is left untouched.
            DubbingError: any stage failure, with ``stage`` set.
        """
        if not self._run_lock.acquire(blocking=False):
            raise RunAlreadyInProgress(
                f"a run is already {self._step.value}", stage=self._step.value
            )
        try:
            self._step = Step.IDLE
            self._detail = ""
            self._progress = 0
            self._error = None
            self._artifact = None
            self._failed_at = None
            self._emit()
            try:
                artifact = self._run(source, credential, output)
            except DubbingError as e:
                if e.stage is None:
                    e.stage = self._step.value
                logger.error(f"Run failed: {e}")
                self._fail(e)
                raise
            except Exception as e:
                logger.exception(f"Run failed unexpectedly during {self._step.value}")
                self._fail(e)
                raise
            self._artifact = artifact
            self._advance(Step.DONE, "Completed", progress=100)
            return artifact
        finally:
            self._run_lock.release()

    def _run(
        self, source: str | Path | None, credential: Credential, output: str | Path | None
    ) -> DubbedArtifact:
        cfg = self.config
        self._advance(Step.PREPARING, "Checking inputs and media engine...")
        if not credential:
            raise MissingCredential("Missing OpenAI API key")
        if source is None or not Path(source).is_file():
            raise NoInputMedia(f"No video uploaded{f': {source} not found' if source else ''}")
        media = SourceMedia(Path(source))
        output_path = Path(output) if output else Path(cfg.output_name)
        area = WorkingArea.inside(self.workdir)
        if area.contains(media.path):
            raise WorkingAreaConflict(
                f"source {media.path} is inside the working area {area.root}"
            )
        if area.contains(output_path):
            raise WorkingAreaConflict(
                f"output {output_path} is inside the working area {area.root}"
            )
        output_path.unlink(missing_ok=True)
        ensure_dir(output_path.parent)
        self.transcoder.check_available()
        client = self._client_factory(credential, cfg.request_timeout)

        with acquire_working_area(area, keep=cfg.keep_workdir):
            staged = area.staged_input(media.staged_name)
            shutil.copyfile(media.path, staged)

            self._advance(Step.EXTRACTING, "Extracting audio track...")
            self.transcoder.extract_audio(staged, area.audio_wav)
            if not area.audio_wav.is_file():
                raise ExtractionFailed(f"no audio track produced from {media.path.name}")

            self._advance(
                Step.SEGMENTING, f"Segmenting audio into {cfg.chunk_seconds}s chunks..."
            )
            chunks = segment_audio(area.audio_wav, area.segments_dir, cfg.chunk_seconds)
            used, dropped = apply_budget(chunks, cfg.max_minutes, cfg.chunk_seconds)

            self._advance(
                Step.TRANSCRIBING,
                f"Dubbing {len(used)} chunk(s) into {get_language_name(cfg.target_language)}",
            )
            dubber = ChunkDubber(
                transcribe=make_transcriber(client, cfg.transcription_model),
                translate=make_translator(
                    client,
                    cfg.target_language,
                    cfg.translation_model,
                    cfg.translation_temperature,
                ),
                synthesize=make_synth_openai(client, cfg.tts_model, cfg.voice),
                out_dir=area.tts_dir,
                empty_translation=cfg.empty_translation,
                on_phase=self._chunk_phase(len(used)) if cfg.max_concurrent == 1 else None,
            )
            synthesized = dub_all(dubber, used, cfg.max_concurrent, on_progress=self._chunk_done)

            self._advance(Step.CONCATENATING, "Concatenating synthesized audio...")
            track = concatenate_chunks(synthesized, area.dubbed_wav)

            self._advance(
                Step.MUXING, f"Muxing dubbed audio into {cfg.output_format.upper()} video..."
            )
            try:
                self.transcoder.remux(staged, area.dubbed_wav, output_path, cfg.output_format)
            except DubbingError:
                output_path.unlink(missing_ok=True)
                raise
            if not output_path.is_file():
                raise MuxingFailed(f"media engine produced no output at {output_path}")
            # -shortest: the picture or the dubbed track may have been cut
            duration_ms = self.transcoder.duration_ms(output_path)

        logger.info(f"Done (dubbed) -> {output_path}")
        return DubbedArtifact(
            path=output_path,
            container=cfg.output_format,
            used_chunks=len(used),
            dropped_chunks=len(dropped),
            dubbed_duration_ms=len(track),
            duration_ms=duration_ms,
        )

    def _chunk_phase(self, total: int) -> Callable[[AudioChunk, str], None]:
        def _report(chunk: AudioChunk, phase: str) -> None:
            self._update(detail=f"Processing segment {chunk.index + 1}/{total}: {phase}")

        return _report

    def _chunk_done(self, completed: int, total: int) -> None:
        self._update(
            detail=f"Dubbed segment {completed}/{total}",
            progress=round(completed / total * 100),
        )
