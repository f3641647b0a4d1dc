"""
Tests for the transcription, translation and speech synthesis calls.
"""

from types import SimpleNamespace

import httpx
import openai
import pytest

from conftest import FakeOpenAI, status_error, write_wav
from segdub.client import make_openai_client
from segdub.config import Credential
from segdub.errors import (
    MissingCredential,
    SpeechSynthesisFailed,
    TranscriptionFailed,
    TranslationFailed,
)
from segdub.stt import transcribe_whisper_api
from segdub.translation import translate_text
from segdub.tts import tts_speak_openai


def test_transcribe_returns_plain_text(tmp_path):
    client = FakeOpenAI()
    wav = write_wav(tmp_path / "seg_000.wav", 1)

    text = transcribe_whisper_api(client, wav, chunk_index=0)

    assert text == "transcript of seg_000.wav"
    assert client.calls["transcribe"] == [
        {"model": "whisper-1", "file": "seg_000.wav", "format": "text"}
    ]


def test_transcribe_accepts_object_response(tmp_path):
    wav = write_wav(tmp_path / "seg_000.wav", 1)
    client = SimpleNamespace(
        audio=SimpleNamespace(
            transcriptions=SimpleNamespace(create=lambda **kw: SimpleNamespace(text=" hello "))
        )
    )

    assert transcribe_whisper_api(client, wav) == "hello"


def test_transcribe_http_error_keeps_status(tmp_path):
    client = FakeOpenAI(fail={"transcribe": (1, 401)})
    wav = write_wav(tmp_path / "seg_002.wav", 1)

    with pytest.raises(TranscriptionFailed) as exc:
        transcribe_whisper_api(client, wav, chunk_index=2)

    assert exc.value.status == 401
    assert exc.value.chunk_index == 2
    assert "401" in str(exc.value)
    assert isinstance(exc.value.__cause__, openai.APIStatusError)


def test_transcribe_connection_error_has_no_status(tmp_path):
    wav = write_wav(tmp_path / "seg_000.wav", 1)

    def boom(**kwargs):
        raise openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com"))

    client = SimpleNamespace(audio=SimpleNamespace(transcriptions=SimpleNamespace(create=boom)))

    with pytest.raises(TranscriptionFailed) as exc:
        transcribe_whisper_api(client, wav)

    assert exc.value.status is None


def test_translate_request_shape():
    client = FakeOpenAI(translation="  Hola a todos  ")

    out = translate_text(client, "Hello everyone", "es")

    assert out == "Hola a todos"
    call = client.calls["translate"][0]
    assert call["model"] == "gpt-4o-mini"
    assert call["temperature"] == 0.3
    system, user = call["messages"]
    assert system["role"] == "system"
    assert "to es" in system["content"]
    assert "Output only the translation." in system["content"]
    assert user == {"role": "user", "content": "Hello everyone"}


def test_translate_missing_content_is_empty_string():
    client = FakeOpenAI(translation=None)

    assert translate_text(client, "Hello", "fr") == ""


def test_translate_no_choices_is_empty_string():
    client = SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=lambda **kw: SimpleNamespace(choices=[])))
    )

    assert translate_text(client, "Hello", "fr") == ""


def test_translate_skips_blank_transcript():
    client = FakeOpenAI()

    assert translate_text(client, "   ", "de") == ""
    assert client.calls["translate"] == []


def test_translate_http_error():
    client = FakeOpenAI(fail={"translate": (1, 500)})

    with pytest.raises(TranslationFailed) as exc:
        translate_text(client, "Hello", "ja", chunk_index=4)

    assert exc.value.status == 500
    assert exc.value.chunk_index == 4


def test_tts_writes_wav(tmp_path):
    client = FakeOpenAI(tts_seconds=1)
    out = tmp_path / "tts_seg_000.wav"

    tts_speak_openai(client, "Hola", "gpt-4o-mini-tts", "sage", out)

    assert out.read_bytes()[:4] == b"RIFF"
    assert client.calls["speech"] == [
        {"model": "gpt-4o-mini-tts", "voice": "sage", "input": "Hola", "format": "wav"}
    ]


def test_tts_http_error(tmp_path):
    client = FakeOpenAI(fail={"speech": (1, 400)})

    with pytest.raises(SpeechSynthesisFailed) as exc:
        tts_speak_openai(client, "Hola", "gpt-4o-mini-tts", "alloy", tmp_path / "x.wav", chunk_index=1)

    assert exc.value.status == 400
    assert not (tmp_path / "x.wav").exists()


def test_status_error_helper_builds_real_sdk_error():
    err = status_error(429)
    assert err.status_code == 429


def test_client_requires_credential():
    with pytest.raises(MissingCredential):
        make_openai_client(Credential(""))


def test_client_never_retries():
    client = make_openai_client(Credential("sk-test-1234"), timeout=30.0)

    assert client.max_retries == 0
    assert client.api_key == "sk-test-1234"
