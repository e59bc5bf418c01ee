"""
Tests for WhisperApiProvider.

Strategy: audio files are real WAVs under tmp_path; requests.post is
patched so the multipart form can be inspected.
"""
import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from tests.session_fixture import make_tone
from vocalflow.asr.AudioArtifact import write_wav
from vocalflow.asr.WhisperApiProvider import WhisperApiProvider
from vocalflow.errors import AudioNotFoundError, ProviderError
from vocalflow.types import ProviderId, TranscriptionOptions

_POST = "vocalflow.asr.WhisperApiProvider.requests.post"


def _make_response(body=None, status_code=200, text="", content_type="application/json"):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = text
    response.headers = {"content-type": content_type}
    response.json.return_value = body
    return response


def _make_file_audio(tmp_path):
    return write_wav(make_tone(500), tmp_path)


class TestForm:

    def test_form_uses_primary_language_subtag(self):
        form = WhisperApiProvider("k").build_form(TranscriptionOptions(language="en-US"))

        assert form["language"] == "en"
        assert form["model"] == "whisper-1"
        assert form["response_format"] == "verbose_json"

    def test_form_includes_temperature_and_prompt(self):
        options = TranscriptionOptions(temperature=0.2, custom_prompt='Custom dictionary words to consider: "K8s"')

        form = WhisperApiProvider("k").build_form(options)

        assert form["temperature"] == "0.2"
        assert form["prompt"].endswith('"K8s"')

    def test_form_omits_unset_optionals(self):
        form = WhisperApiProvider("k").build_form(TranscriptionOptions())

        assert "temperature" not in form
        assert "prompt" not in form


class TestTranscribe:

    def test_uploads_file_with_bearer_token(self, tmp_path):
        audio = _make_file_audio(tmp_path)

        with patch(_POST, return_value=_make_response({"text": "Hello there."})) as post:
            result = asyncio.run(WhisperApiProvider("sk-test").transcribe(audio, TranscriptionOptions()))

        kwargs = post.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        name, _, mime = kwargs["files"]["file"]
        assert name == audio.path.name
        assert mime == "audio/wav"
        assert result.text == "Hello there."
        assert result.confidence == 1.0
        assert result.provider_id == ProviderId.ACCURATE_CLOUD
        assert result.succeeded is True

    def test_plain_text_response(self, tmp_path):
        audio = _make_file_audio(tmp_path)

        with patch(_POST, return_value=_make_response(text="plain words\n", content_type="text/plain")):
            result = asyncio.run(WhisperApiProvider("k").transcribe(audio, TranscriptionOptions()))

        assert result.text == "plain words"

    def test_empty_text_is_not_success(self, tmp_path):
        audio = _make_file_audio(tmp_path)

        with patch(_POST, return_value=_make_response({"text": "   "})):
            result = asyncio.run(WhisperApiProvider("k").transcribe(audio, TranscriptionOptions()))

        assert result.succeeded is False

    def test_missing_file_raises_audio_not_found(self, tmp_path, speech_audio):
        with patch(_POST) as post:
            with pytest.raises(AudioNotFoundError):
                asyncio.run(WhisperApiProvider("k").transcribe(speech_audio, TranscriptionOptions()))
        post.assert_not_called()

    def test_http_error_raises_with_status(self, tmp_path):
        audio = _make_file_audio(tmp_path)

        with patch(_POST, return_value=_make_response(status_code=429, text="rate limited")):
            with pytest.raises(ProviderError) as exc_info:
                asyncio.run(WhisperApiProvider("k").transcribe(audio, TranscriptionOptions()))

        assert exc_info.value.status_code == 429

    def test_timeout_raises_without_status(self, tmp_path):
        audio = _make_file_audio(tmp_path)

        with patch(_POST, side_effect=requests.exceptions.Timeout("slow")):
            with pytest.raises(ProviderError) as exc_info:
                asyncio.run(WhisperApiProvider("k").transcribe(audio, TranscriptionOptions()))

        assert exc_info.value.status_code is None
