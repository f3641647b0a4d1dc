"""
Error taxonomy for the dubbing pipeline.

Every error aborts the active run. The orchestrator stamps the step it was
in onto ``stage`` before re-raising, so callers can always tell where a
run died and, for service calls, with which HTTP status.
"""


class DubbingError(RuntimeError):
    """Base class for all pipeline failures."""

    def __init__(self, detail: str = "", *, stage: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.stage = stage

    def __str__(self) -> str:
        msg = self.detail or self.__class__.__name__
        return f"[{self.stage}] {msg}" if self.stage else msg


class MissingCredential(DubbingError):
    """No API key was supplied for the run."""


class NoInputMedia(DubbingError):
    """No source video was supplied, or it does not exist."""


class ExtractionFailed(DubbingError):
    """ffmpeg could not produce the normalized audio track."""


class NoSegmentsProduced(DubbingError):
    """The normalized track was empty or silent; nothing to dub."""


class IncompatibleChunkFormat(DubbingError):
    """Synthesized chunks do not share one sample format."""


class MuxingFailed(DubbingError):
    """ffmpeg could not combine the dubbed track with the video stream."""


class RunAlreadyInProgress(DubbingError):
    """A second run was started while one is still active."""


class WorkingAreaConflict(DubbingError):
    """The source or output path lies inside the run's scratch directory."""


class ServiceCallFailed(DubbingError):
    """A transcription/translation/synthesis request was rejected."""

    service = "service"

    def __init__(
        self,
        status: int | None,
        detail: str = "",
        *,
        chunk_index: int | None = None,
        stage: str | None = None,
    ):
        self.status = status
        self.chunk_index = chunk_index
        where = f" on chunk {chunk_index}" if chunk_index is not None else ""
        code = status if status is not None else "no response"
        msg = f"{self.service} failed{where}: {code}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg, stage=stage)


class TranscriptionFailed(ServiceCallFailed):
    service = "Transcription"


class TranslationFailed(ServiceCallFailed):
    service = "Translation"


class SpeechSynthesisFailed(ServiceCallFailed):
    service = "Speech synthesis"
