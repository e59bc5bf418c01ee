"""
DictationApp - wires every dictation component from configuration and paths.

Components are constructed here explicitly and handed to each other; nothing
is looked up through module-level singletons. start() registers the
non-critical start-up work (the first analytics refresh) with the deferral
queue and then marks the app initialized.
"""
import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from vocalflow.ConfigLoader import get_api_key, mask_key
from vocalflow.HostBridge import HostBridge
from vocalflow.ModeClassifier import ModeClassifier
from vocalflow.PathResolver import ResolvedPaths
from vocalflow.StartupDeferralQueue import StartupDeferralQueue
from vocalflow.TranscriptionOrchestrator import TranscriptionOrchestrator
from vocalflow.analytics.AnalyticsStore import AnalyticsStore
from vocalflow.analytics.StatsAggregator import StatsAggregator
from vocalflow.analytics.TimeSavingsCalculator import TimeSavingsCalculator, TimeSavingsModel
from vocalflow.asr.AudioArtifact import read_wav
from vocalflow.asr.DeepgramProvider import DeepgramProvider
from vocalflow.asr.WhisperApiProvider import WhisperApiProvider
from vocalflow.controllers.PushToTalkController import PushToTalkController
from vocalflow.dictionary.DictionaryService import DictionaryService
from vocalflow.dictionary.JsonDictionaryStorage import JsonDictionaryStorage
from vocalflow.errors import PersistenceError
from vocalflow.focus.AppleScriptAccessibility import AppleScriptAccessibility
from vocalflow.focus.FocusGate import FocusGate
from vocalflow.protocols import AccessibilityBackend, TranscriptionProvider
from vocalflow.types import (
    DashboardStats,
    DictationMode,
    ProviderId,
    TranscriptionOptions,
    TranscriptionOutcome,
)

logger = logging.getLogger(__name__)


def build_providers(config: Dict[str, Any]) -> Dict[ProviderId, TranscriptionProvider]:
    """Create the cloud providers whose API keys are present in the environment."""
    providers: Dict[ProviderId, TranscriptionProvider] = {}

    deepgram_key = get_api_key("deepgram")
    if deepgram_key:
        section = config["deepgram"]
        providers[ProviderId.FAST_CLOUD] = DeepgramProvider(
            deepgram_key, model=section["model"], url=section["url"], timeout_s=section["timeout_s"]
        )
        logger.info("DictationApp: fast provider registered (key %s)", mask_key(deepgram_key))

    openai_key = get_api_key("openai")
    if openai_key:
        section = config["openai"]
        providers[ProviderId.ACCURATE_CLOUD] = WhisperApiProvider(
            openai_key, model=section["model"], url=section["url"], timeout_s=section["timeout_s"]
        )
        logger.info("DictationApp: accurate provider registered (key %s)", mask_key(openai_key))

    return providers


class DictationApp:
    """
    Args:
        config: Merged configuration dictionary
        paths: Resolved application paths
        providers: Transcription backends; built from the environment when None
        accessibility: Accessibility backend; AppleScript when None
        notifier: Receives user-facing messages
        on_transcript: Receives each successful transcript for insertion

    Raises:
        ValueError: no transcription provider is available
    """

    def __init__(
        self,
        config: Dict[str, Any],
        paths: ResolvedPaths,
        providers: Optional[Dict[ProviderId, TranscriptionProvider]] = None,
        accessibility: Optional[AccessibilityBackend] = None,
        notifier: Optional[Callable[[str], None]] = None,
        on_transcript: Optional[Callable[[str], None]] = None
    ) -> None:
        self._config = config
        self._paths = paths

        if providers is None:
            providers = build_providers(config)
        if not providers:
            raise ValueError("No transcription provider configured: set DEEPGRAM_API_KEY or OPENAI_API_KEY")

        transcription = config["transcription"]
        focus = config["focus"]
        analytics = config["analytics"]
        push_to_talk = config["push_to_talk"]

        self.dictionary = DictionaryService(JsonDictionaryStorage(paths.dictionary_file))
        self.focus_gate = FocusGate(
            accessibility or AppleScriptAccessibility(),
            fast_timeout_s=focus["fast_timeout_s"],
            detailed_timeout_s=focus["detailed_timeout_s"],
        )
        self.orchestrator = TranscriptionOrchestrator(
            providers,
            self.dictionary,
            default_options=TranscriptionOptions.from_dict({
                "language": transcription["language"],
                "temperature": transcription["temperature"],
                "custom_prompt": transcription["custom_prompt"],
            }),
            fast_max_audio_ms=transcription["fast_max_audio_ms"],
            mode_classifier=ModeClassifier(),
        )
        self.store = AnalyticsStore(paths.analytics_file, max_events=analytics["max_events"])
        self.calculator = TimeSavingsCalculator(TimeSavingsModel.from_config(analytics))
        self.aggregator = StatsAggregator(self.calculator)
        self.host = HostBridge(
            paths.sounds_dir,
            sound_enabled=push_to_talk["sound_cues"],
            notifier=notifier,
        )
        self.push_to_talk = PushToTalkController(
            self.focus_gate,
            self.orchestrator,
            self.store,
            self.host,
            min_audio_ms=push_to_talk["min_audio_ms"],
            focus_enabled=focus["enabled"],
            on_transcript=on_transcript,
        )
        self.startup_queue = StartupDeferralQueue(delay_s=config["startup"]["deferred_delay_ms"] / 1000)

        self._latest_stats: Optional[DashboardStats] = None

    @property
    def latest_stats(self) -> Optional[DashboardStats]:
        return self._latest_stats

    async def start(self) -> None:
        """Mark the app ready and let deferred start-up work run. Needs a running loop."""
        self.startup_queue.defer_task(self.refresh_stats)
        self.startup_queue.mark_initialized()
        logger.info("DictationApp: started")

    async def refresh_stats(self) -> DashboardStats:
        self._latest_stats = await asyncio.to_thread(self.get_stats)
        logger.info("DictationApp: stats refreshed (%d sessions)", self._latest_stats.total_sessions)
        return self._latest_stats

    def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        # Naive local wall clock; stored session times are converted with the host DST rules
        now = now or datetime.now()
        return self.aggregator.build_stats(self.store.get_sessions(), now)

    def get_insights(self, now: Optional[datetime] = None) -> List[str]:
        now = now or datetime.now()
        savings = self.calculator.calculate_cumulative_savings(self.store.get_sessions(), now)
        return self.calculator.get_productivity_insights(savings)

    async def transcribe_file(self, path: Path, mode: Optional[DictationMode] = None) -> TranscriptionOutcome:
        """Transcribe a WAV file outside the push-to-talk flow and store the session."""
        audio = await asyncio.to_thread(read_wav, path)
        outcome = await self.orchestrator.transcribe(audio, mode)
        if outcome.succeeded:
            try:
                self.store.save_session(outcome.session)
            except PersistenceError as e:
                logger.error("DictationApp: session %s not stored: %s", outcome.session.id, e)
        return outcome
