import logging
from typing import Callable, Optional

from vocalflow.HostBridge import HostBridge
from vocalflow.TranscriptionOrchestrator import TranscriptionOrchestrator
from vocalflow.analytics.AnalyticsStore import AnalyticsStore
from vocalflow.asr.AudioArtifact import has_significant_audio
from vocalflow.errors import PersistenceError
from vocalflow.focus.FocusGate import FocusGate
from vocalflow.types import CapturedAudio, DictationMode, TranscriptionOutcome

logger = logging.getLogger(__name__)

START_SOUND = "key-press"
STOP_SOUND = "key-release"
NO_TEXT_FIELD_MESSAGE = "Place your cursor in a text field to dictate."


class PushToTalkController:
    """
    Drives one push-to-talk dictation: key down arms recording when a text
    input is focused, key up turns the captured audio into a stored session.

    Audio capture and text insertion belong to the host; the controller only
    receives the finished recording and hands the transcript to on_transcript.
    """

    def __init__(
        self,
        focus_gate: FocusGate,
        orchestrator: TranscriptionOrchestrator,
        store: AnalyticsStore,
        host: HostBridge,
        min_audio_ms: int = 150,
        focus_enabled: bool = True,
        on_transcript: Optional[Callable[[str], None]] = None
    ) -> None:
        self._focus_gate = focus_gate
        self._orchestrator = orchestrator
        self._store = store
        self._host = host
        self._min_audio_ms = min_audio_ms
        self._focus_enabled = focus_enabled
        self._on_transcript = on_transcript
        self._armed = False

    @property
    def is_armed(self) -> bool:
        return self._armed

    async def on_key_down(self) -> bool:
        if self._focus_enabled and not await self._focus_gate.is_text_input_focused_fast():
            logger.info("PushToTalkController: no text input focused, ignoring key down")
            self._armed = False
            self._host.notify(NO_TEXT_FIELD_MESSAGE)
            return False

        self._armed = True
        self._host.play_sound(START_SOUND)
        return True

    async def on_key_up(
        self,
        audio: CapturedAudio,
        mode: Optional[DictationMode] = None
    ) -> Optional[TranscriptionOutcome]:
        """
        Transcribe the recording made while the key was held.

        Returns:
            The orchestrator outcome, or None when the press was not armed or
            the recording held no usable speech
        """
        if not self._armed:
            logger.debug("PushToTalkController: key up without armed key down")
            return None
        self._armed = False
        self._host.play_sound(STOP_SOUND)

        if audio.duration_ms < self._min_audio_ms or not has_significant_audio(audio):
            logger.info("PushToTalkController: discarding recording (%dms, no significant audio)",
                        audio.duration_ms)
            self._store.track_event("dictation_discarded", {"audioLengthMs": audio.duration_ms})
            return None

        outcome = await self._orchestrator.transcribe(audio, mode)

        if not outcome.succeeded:
            self._store.track_event("dictation_failed", {"audioLengthMs": audio.duration_ms})
            self._host.notify(outcome.message)
            return outcome

        session = outcome.session
        try:
            self._store.save_session(session)
        except PersistenceError as e:
            logger.error("PushToTalkController: session %s not stored: %s", session.id, e)

        self._store.track_event("dictation_completed", {
            "mode": session.mode.value,
            "characters": session.character_count,
            "provider": outcome.result.provider_id.value,
        })

        if self._on_transcript is not None:
            self._on_transcript(session.transcription_text)
        return outcome
