"""Accuracy-oriented cloud transcription over the OpenAI audio transcription API."""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict

import requests

from vocalflow.errors import AudioNotFoundError, ProviderError
from vocalflow.types import CapturedAudio, ProviderId, TranscriptionOptions, TranscriptionResult

logger = logging.getLogger(__name__)

OPENAI_TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"


class WhisperApiProvider:
    """Uploads an audio file as multipart form data and returns its text.

    The upstream API has no confidence score, so results report 1.0.

    Args:
        api_key: OpenAI API key
        model: Model identifier sent with every request
        url: Transcriptions endpoint
        timeout_s: Request timeout
    """

    provider_id = ProviderId.ACCURATE_CLOUD
    requires_file = True

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        url: str = OPENAI_TRANSCRIPTIONS_URL,
        timeout_s: float = 60.0
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = url
        self._timeout_s = timeout_s

    @property
    def model_name(self) -> str:
        return self._model

    def build_form(self, options: TranscriptionOptions) -> Dict[str, str]:
        form = {
            "model": self._model,
            "response_format": "verbose_json",
        }
        if options.temperature is not None:
            form["temperature"] = str(options.temperature)
        if options.language:
            # The API takes ISO-639-1 codes ("en"), not regional tags ("en-US")
            form["language"] = options.language.split("-")[0].lower()
        if options.custom_prompt:
            form["prompt"] = options.custom_prompt
        return form

    async def transcribe(self, audio: CapturedAudio, options: TranscriptionOptions) -> TranscriptionResult:
        if audio.path is None or not Path(audio.path).is_file():
            raise AudioNotFoundError(f"Audio file not found: {audio.path}")

        form = self.build_form(options)
        start = time.monotonic()
        response = await asyncio.to_thread(self._post, Path(audio.path), form)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not response.ok:
            logger.error("WhisperApiProvider: API error (%s): %s", response.status_code, response.text[:200])
            raise ProviderError(response.status_code, response.text)

        text = self._extract_text(response).strip()
        logger.info("WhisperApiProvider: %dms text='%s'", elapsed_ms, text[:50])

        return TranscriptionResult(
            text=text,
            provider_id=self.provider_id,
            confidence=1.0,
            succeeded=bool(text),
        )

    @staticmethod
    def _extract_text(response: requests.Response) -> str:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                body: Any = response.json()
            except ValueError:
                return ""
            if isinstance(body, dict):
                return body.get("text") or ""
            return ""
        return response.text or ""

    def _post(self, path: Path, form: Dict[str, str]) -> requests.Response:
        try:
            with open(path, "rb") as audio_file:
                return requests.post(
                    self._url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    data=form,
                    files={"file": (path.name, audio_file, "audio/wav")},
                    timeout=self._timeout_s,
                )
        except requests.exceptions.Timeout as e:
            raise ProviderError(None, f"OpenAI request timed out after {self._timeout_s}s") from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderError(None, f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(None, f"Request failed: {e}") from e
