"""
Translation of chunk transcripts into the dubbing language.
"""

import logging
from collections.abc import Callable

from openai import OpenAI

from .client import service_errors
from .errors import TranslationFailed

logger = logging.getLogger("segdub")


def build_system_prompt(target_language: str) -> str:
    """Instruction that keeps the model to a bare translation."""
    return (
        f"You are a professional media translator. Translate the user's text to "
        f"{target_language} for voice dubbing. Keep meaning and tone. "
        "Do not add extra commentary. Output only the translation."
    )


def translate_text(
    client: OpenAI,
    text: str,
    target_language: str,
    model: str = "gpt-4o-mini",
    temperature: float = 0.3,
    chunk_index: int | None = None,
) -> str:
    """
    Translate text into ``target_language`` using OpenAI GPT.

    Args:
        client: OpenAI client instance
        text: Transcript to translate
        target_language: Target language code, e.g. "es"
        model: GPT model to use for translation
        temperature: Sampling temperature
        chunk_index: Chunk being translated, for error reporting

    Returns:
        The translated text. A response without content yields "" rather
        than an error; a blank transcript is returned as "" without a request.
    """
    if not text.strip():
        return ""

    with service_errors(TranslationFailed, chunk_index):
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": build_system_prompt(target_language)},
                {"role": "user", "content": text},
            ],
            temperature=temperature,
        )

    choices = getattr(response, "choices", None) or []
    content = choices[0].message.content if choices else None
    translated = (content or "").strip()
    if not translated:
        logger.warning(f"Translation of chunk {chunk_index} came back empty")
    else:
        logger.debug(f"Translation completed: {len(text)} -> {len(translated)} characters")
    return translated


def make_translator(
    client: OpenAI, target_language: str, model: str, temperature: float
) -> Callable[[str, int], str]:
    """Create translation function bound to a client, language and model."""

    def _translate(text: str, chunk_index: int) -> str:
        return translate_text(
            client,
            text,
            target_language,
            model=model,
            temperature=temperature,
            chunk_index=chunk_index,
        )

    return _translate
