"""Low-latency cloud transcription over the Deepgram pre-recorded HTTP API."""

import asyncio
import logging
import time
from typing import List, Tuple

import requests

from vocalflow.errors import ProviderError
from vocalflow.types import (
    SAMPLE_RATE,
    CapturedAudio,
    ProviderId,
    TranscriptionOptions,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)

DEEPGRAM_LISTEN_URL = "https://api.deepgram.com/v1/listen"


class DeepgramProvider:
    """Sends raw linear16 PCM to Deepgram and returns the first alternative.

    Always requests smart formatting, punctuation and capitalization with an
    explicit language, VAD events and endpointing disabled so that quiet or
    whispered speech is not cut off. Opts out of the model improvement
    program. temperature and custom_prompt are not used by this backend.

    Args:
        api_key: Deepgram API key
        model: Model tier
        url: Listen endpoint
        timeout_s: Request timeout
    """

    provider_id = ProviderId.FAST_CLOUD
    requires_file = False

    def __init__(
        self,
        api_key: str,
        model: str = "nova-3",
        url: str = DEEPGRAM_LISTEN_URL,
        timeout_s: float = 30.0
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._url = url
        self._timeout_s = timeout_s

    @property
    def model_name(self) -> str:
        return f"deepgram-{self._model}"

    def build_params(self, options: TranscriptionOptions) -> List[Tuple[str, str]]:
        """Query parameters; requests percent-encodes the keyterm value."""
        params = [
            ("model", self._model),
            ("language", options.language),
            ("detect_language", "false"),
            ("smart_format", "true"),
            ("punctuate", "true"),
            ("capitalization", "true"),
            ("encoding", "linear16"),
            ("sample_rate", str(SAMPLE_RATE)),
            ("mip_opt_out", "true"),
            ("vad_events", "true"),
            ("endpointing", "false"),
            ("utterances", "true"),
        ]
        if options.dictionary_keywords:
            params.append(("keyterm", options.dictionary_keywords))
        return params

    async def transcribe(self, audio: CapturedAudio, options: TranscriptionOptions) -> TranscriptionResult:
        if audio.sample_rate != SAMPLE_RATE:
            raise ProviderError(None, f"Deepgram expects {SAMPLE_RATE} Hz audio, got {audio.sample_rate} Hz")

        start = time.monotonic()
        response = await asyncio.to_thread(self._post, audio.pcm_bytes(), self.build_params(options))
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if not response.ok:
            logger.error("DeepgramProvider: API error (%s): %s", response.status_code, response.text[:200])
            raise ProviderError(response.status_code, response.text)

        try:
            alternative = response.json()["results"]["channels"][0]["alternatives"][0]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("DeepgramProvider: response without transcript (%dms)", elapsed_ms)
            return TranscriptionResult(text="", provider_id=self.provider_id, confidence=None, succeeded=False)

        transcript = (alternative.get("transcript") or "").strip()
        confidence = alternative.get("confidence")
        logger.info("DeepgramProvider: %dms confidence=%s text='%s'", elapsed_ms, confidence, transcript[:50])

        return TranscriptionResult(
            text=transcript,
            provider_id=self.provider_id,
            confidence=float(confidence) if confidence is not None else None,
            succeeded=bool(transcript),
        )

    def _post(self, payload: bytes, params: List[Tuple[str, str]]) -> requests.Response:
        try:
            return requests.post(
                self._url,
                params=params,
                data=payload,
                headers={
                    "Authorization": f"Token {self._api_key}",
                    "Content-Type": f"audio/l16;rate={SAMPLE_RATE}",
                },
                timeout=self._timeout_s,
            )
        except requests.exceptions.Timeout as e:
            raise ProviderError(None, f"Deepgram request timed out after {self._timeout_s}s") from e
        except requests.exceptions.ConnectionError as e:
            raise ProviderError(None, f"Connection error: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(None, f"Request failed: {e}") from e
