"""
Run configuration: languages, voices, budgets and service settings.
"""

import os
from dataclasses import dataclass

# Target languages offered for dubbing, code -> display name
LANGUAGES: dict[str, str] = {
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "hi": "Hindi",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese (Simplified)",
    "ar": "Arabic",
}

VOICE_PRESETS: tuple[str, ...] = (
    "alloy",
    "verse",
    "aria",
    "bright",
    "calypso",
    "lively",
    "sage",
    "soft",
)

OUTPUT_FORMATS: tuple[str, ...] = ("webm", "mp4")
EMPTY_TRANSLATION_POLICIES: tuple[str, ...] = ("silence", "error")

MIN_MINUTES = 1
MAX_MINUTES = 300
DEFAULT_MAX_MINUTES = 45
DEFAULT_CHUNK_SECONDS = 60

# Normalized track fed to transcription
EXTRACT_SAMPLE_RATE = 16000

# Fixed format of synthesized speech (OpenAI TTS wav output)
SYNTH_SAMPLE_RATE = 24000
SYNTH_CHANNELS = 1
SYNTH_SAMPLE_WIDTH = 2


def get_language_name(language_code: str) -> str:
    """Get human-readable language name from language code."""
    return LANGUAGES.get(language_code.lower(), language_code.upper())


def clamp_minutes(value: float) -> float:
    """Clamp a processing budget into the accepted [1, 300] range."""
    return max(MIN_MINUTES, min(MAX_MINUTES, value))


class Credential:
    """Bearer token for the speech/translation services.

    Passed explicitly into each run; the token is masked in ``repr`` so it
    never ends up in logs or tracebacks.
    """

    __slots__ = ("_token",)

    def __init__(self, token: str | None):
        self._token = (token or "").strip()

    @classmethod
    def from_env(cls, var: str = "OPENAI_API_KEY") -> "Credential":
        return cls(os.getenv(var))

    @property
    def token(self) -> str:
        return self._token

    def __bool__(self) -> bool:
        return bool(self._token)

    def __repr__(self) -> str:
        if not self._token:
            return "Credential(<missing>)"
        return f"Credential(...{self._token[-4:]})"


@dataclass
class DubbingConfig:
    """Options recognized by a dubbing run."""

    target_language: str = "es"
    voice: str = VOICE_PRESETS[0]
    max_minutes: float = DEFAULT_MAX_MINUTES
    chunk_seconds: int = DEFAULT_CHUNK_SECONDS

    transcription_model: str = "whisper-1"
    translation_model: str = "gpt-4o-mini"
    translation_temperature: float = 0.3
    tts_model: str = "gpt-4o-mini-tts"

    output_format: str = "webm"
    empty_translation: str = "silence"
    max_concurrent: int = 1
    request_timeout: float = 120.0
    keep_workdir: bool = False

    def __post_init__(self) -> None:
        if self.target_language not in LANGUAGES:
            raise ValueError(
                f"Unsupported target language {self.target_language!r}; "
                f"choose one of {', '.join(LANGUAGES)}"
            )
        if self.voice not in VOICE_PRESETS:
            raise ValueError(
                f"Unknown voice preset {self.voice!r}; choose one of {', '.join(VOICE_PRESETS)}"
            )
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format {self.output_format!r}")
        if self.empty_translation not in EMPTY_TRANSLATION_POLICIES:
            raise ValueError(f"Unknown empty-translation policy {self.empty_translation!r}")
        if self.chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be positive")
        if self.max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_minutes = clamp_minutes(self.max_minutes)

    @property
    def output_name(self) -> str:
        return f"dubbed.{self.output_format}"
