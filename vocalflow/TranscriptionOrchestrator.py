"""
TranscriptionOrchestrator - turns one captured recording into a session record.

Algorithm:
    1. Resolve dictionary context (keywords + hint sentence) and merge it into
       the transcription options before any provider is called.
    2. Order providers by audio length: short clips go to the fast provider
       first, long clips to the accurate provider first.
    3. Try each provider at most once. A ProviderError, a missing audio file,
       a WAV that cannot be written for a file-based provider or an empty
       transcript moves on to the next provider.
    4. Measure the elapsed time and emit a TranscriptionSession. If every
       provider failed, no session is produced and a neutral message is
       returned instead; failed attempts are not counted in analytics.
"""
import logging
import time
import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from vocalflow.ModeClassifier import ModeClassifier
from vocalflow.asr.AudioArtifact import write_wav
from vocalflow.dictionary.DictionaryService import DictionaryService
from vocalflow.errors import AudioNotFoundError, ProviderError
from vocalflow.protocols import TranscriptionProvider
from vocalflow.types import (
    CapturedAudio,
    DictationMode,
    ProviderId,
    SessionMetadata,
    TranscriptionOptions,
    TranscriptionOutcome,
    TranscriptionResult,
    TranscriptionSession,
)

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Transcription failed. Please try again."
NO_SPEECH_MESSAGE = "No speech detected. Please try again."


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TranscriptionOrchestrator:
    """
    Args:
        providers: Available backends keyed by id; at least one is required
        dictionary: Source of boosting keywords and the context hint
        default_options: Options used when a call passes none
        fast_max_audio_ms: Longest clip still routed to the fast provider first
        artifact_dir: Where WAV files for file-based providers are written
        mode_classifier: Used when a call does not state the mode
        clock: Monotonic clock in seconds
        now: Wall clock for session start times
    """

    def __init__(
        self,
        providers: Dict[ProviderId, TranscriptionProvider],
        dictionary: DictionaryService,
        default_options: Optional[TranscriptionOptions] = None,
        fast_max_audio_ms: int = 10000,
        artifact_dir: Optional[Path] = None,
        mode_classifier: Optional[ModeClassifier] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _local_now
    ) -> None:
        if not providers:
            raise ValueError("At least one transcription provider is required")
        self._providers = dict(providers)
        self._dictionary = dictionary
        self._default_options = default_options or TranscriptionOptions()
        self._fast_max_audio_ms = fast_max_audio_ms
        self._artifact_dir = artifact_dir
        self._mode_classifier = mode_classifier or ModeClassifier()
        self._clock = clock
        self._now = now

    def provider_order(self, audio_length_ms: int) -> List[TranscriptionProvider]:
        if audio_length_ms <= self._fast_max_audio_ms:
            preferred = (ProviderId.FAST_CLOUD, ProviderId.ACCURATE_CLOUD)
        else:
            preferred = (ProviderId.ACCURATE_CLOUD, ProviderId.FAST_CLOUD)
        return [self._providers[pid] for pid in preferred if pid in self._providers]

    async def build_options(self, options: Optional[TranscriptionOptions] = None) -> TranscriptionOptions:
        """Merge dictionary keywords and hint into the given options."""
        options = options or self._default_options
        keywords = await self._dictionary.keywords_for_boosting()
        hint = await self._dictionary.render_context_hint()

        prompt_parts = [part for part in (options.custom_prompt, hint) if part]
        return replace(
            options,
            dictionary_keywords=keywords or options.dictionary_keywords,
            custom_prompt=' '.join(prompt_parts) or None,
        )

    async def transcribe(
        self,
        audio: CapturedAudio,
        mode: Optional[DictationMode] = None,
        options: Optional[TranscriptionOptions] = None
    ) -> TranscriptionOutcome:
        """
        Transcribe one recording.

        Args:
            audio: Captured push-to-talk audio
            mode: Active mode; classified from the transcript when None
            options: Overrides the default options

        Returns:
            TranscriptionOutcome with a session on success, a message otherwise
        """
        started_at = self._now()
        start = self._clock()

        resolved = await self.build_options(options)
        last_result: Optional[TranscriptionResult] = None
        file_audio: Optional[CapturedAudio] = None
        written: Optional[Path] = None

        try:
            for provider in self.provider_order(audio.duration_ms):
                payload = audio
                if provider.requires_file and audio.path is None:
                    if file_audio is None:
                        try:
                            file_audio = write_wav(audio, self._artifact_dir)
                        except (OSError, RuntimeError) as e:
                            logger.warning("TranscriptionOrchestrator: cannot write audio for %s: %s",
                                           provider.provider_id.value, e)
                            continue
                        written = file_audio.path
                    payload = file_audio

                try:
                    result = await provider.transcribe(payload, resolved)
                except (ProviderError, AudioNotFoundError) as e:
                    logger.warning("TranscriptionOrchestrator: %s failed: %s", provider.provider_id.value, e)
                    continue

                if result.succeeded:
                    processing_ms = max(0, int(round((self._clock() - start) * 1000)))
                    session = self._build_session(audio, result, mode, resolved, started_at, processing_ms)
                    return TranscriptionOutcome(session=session, result=result)

                logger.info("TranscriptionOrchestrator: %s returned no speech", provider.provider_id.value)
                last_result = result
        finally:
            if written is not None and written.exists():
                written.unlink()

        if last_result is not None:
            return TranscriptionOutcome(session=None, result=last_result, message=NO_SPEECH_MESSAGE)
        return TranscriptionOutcome(session=None, message=FAILURE_MESSAGE)

    def _build_session(
        self,
        audio: CapturedAudio,
        result: TranscriptionResult,
        mode: Optional[DictationMode],
        options: TranscriptionOptions,
        started_at: datetime,
        processing_ms: int
    ) -> TranscriptionSession:
        if mode is None:
            mode = self._mode_classifier.classify(result.text)

        provider = self._providers[result.provider_id]
        session = TranscriptionSession(
            id=uuid.uuid4().hex,
            start_time=started_at,
            mode=mode,
            transcription_text=result.text,
            character_count=len(result.text),
            processing_time_ms=processing_ms,
            metadata=SessionMetadata(
                audio_length_ms=audio.duration_ms,
                model=getattr(provider, 'model_name', result.provider_id.value),
                language=options.language,
            ),
        )
        logger.info("TranscriptionOrchestrator: session %s mode=%s chars=%d audio=%dms processing=%dms",
                    session.id, mode.value, session.character_count, audio.duration_ms, processing_ms)
        return session
