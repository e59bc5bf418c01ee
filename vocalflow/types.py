"""Type definitions shared by the dictation pipeline and the analytics engine."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import numpy as np
import numpy.typing as npt

from vocalflow.errors import ValidationError

# 16-bit linear PCM, mono, 16 kHz
SAMPLE_RATE = 16000

# Roles the accessibility layer reports for editable text controls
TEXT_INPUT_ROLES = frozenset({"AXTextField", "AXTextArea", "AXComboBox", "AXTextView"})
WEB_AREA_ROLE = "AXWebArea"


class DictationMode(str, Enum):
    """How a transcript is used.

    DICTATION: literal text typed into the focused field.
    COMMAND: transcript triggers an assistant action instead.
    """
    DICTATION = "dictation"
    COMMAND = "command"


class ProviderId(str, Enum):
    FAST_CLOUD = "fast-cloud"
    ACCURATE_CLOUD = "accurate-cloud"


@dataclass(frozen=True)
class DictionaryEntry:
    """User vocabulary item used to bias recognition.

    Attributes:
        id: Unique identifier within the collection
        word: Non-empty, trimmed word or phrase
        pronunciation: Optional phonetic hint ("koo-ber-net-eez")
        context: Optional usage note
        created_at: Creation timestamp (timezone-aware)
    """
    id: str
    word: str
    created_at: datetime
    pronunciation: Optional[str] = None
    context: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "pronunciation": self.pronunciation,
            "context": self.context,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DictionaryEntry":
        return cls(
            id=str(raw["id"]),
            word=str(raw["word"]),
            pronunciation=raw.get("pronunciation") or None,
            context=raw.get("context") or None,
            created_at=datetime.fromisoformat(raw["createdAt"]),
        )


@dataclass(frozen=True)
class FocusedElement:
    """Raw answer of the accessibility layer for the frontmost focused element."""
    role: str
    application: str = "unknown"
    description: str = ""
    editable: Optional[bool] = None


def is_text_input_role(role: str, editable: Optional[bool]) -> bool:
    """Classify an accessibility role as text input.

    Web content areas only count when the element reports itself editable.
    """
    if role in TEXT_INPUT_ROLES:
        return True
    if role == WEB_AREA_ROLE:
        return editable is True
    return False


@dataclass(frozen=True)
class FocusSnapshot:
    role: str
    application: str
    description: str
    is_text_input: bool

    @classmethod
    def from_element(cls, element: FocusedElement) -> "FocusSnapshot":
        return cls(
            role=element.role,
            application=element.application,
            description=element.description,
            is_text_input=is_text_input_role(element.role, element.editable),
        )

    @classmethod
    def unavailable(cls, reason: str) -> "FocusSnapshot":
        return cls(role="error", application="unknown", description=reason, is_text_input=False)


@dataclass(frozen=True)
class TranscriptionOptions:
    """Recognized transcription options.

    Attributes:
        language: BCP-47 tag ("en-US"); the accurate provider uses the primary subtag only
        temperature: Sampling temperature for the accurate provider, ignored by the fast one
        custom_prompt: Free-text context forwarded as prompt
        dictionary_keywords: Comma-separated boosting vocabulary
    """
    language: str = "en-US"
    temperature: Optional[float] = None
    custom_prompt: Optional[str] = None
    dictionary_keywords: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "TranscriptionOptions":
        """Build options from a config section.

        Raises:
            ValidationError: on unknown keys or a temperature outside [0, 1]
        """
        known = {f.name for f in fields(cls)}
        unknown = set(raw) - known
        if unknown:
            raise ValidationError(f"Unknown transcription options: {sorted(unknown)}")
        options = cls(**raw)
        if options.temperature is not None and not 0.0 <= options.temperature <= 1.0:
            raise ValidationError(f"temperature must be within [0, 1], got {options.temperature}")
        return options


@dataclass(frozen=True)
class TranscriptionResult:
    """Single provider answer.

    Attributes:
        text: Transcript (may be empty)
        provider_id: Which backend produced it
        confidence: Value in [0, 1], None when the upstream has none
        succeeded: False when the provider answered but recognized no speech
    """
    text: str
    provider_id: ProviderId
    confidence: Optional[float] = None
    succeeded: bool = True


@dataclass(frozen=True)
class CapturedAudio:
    """Recorded push-to-talk audio.

    Attributes:
        samples: int16 mono PCM samples
        sample_rate: Samples per second
        path: Optional file holding the same audio on disk
    """
    samples: npt.NDArray[np.int16]
    sample_rate: int = SAMPLE_RATE
    path: Optional[Path] = None

    @property
    def duration_ms(self) -> int:
        if self.sample_rate <= 0:
            return 0
        return int(round(len(self.samples) * 1000 / self.sample_rate))

    def pcm_bytes(self) -> bytes:
        """Little-endian linear16 payload."""
        return np.asarray(self.samples, dtype="<i2").tobytes()


@dataclass(frozen=True)
class SessionMetadata:
    audio_length_ms: int = 0
    model: str = "unknown"
    language: str = "en"


@dataclass(frozen=True)
class TranscriptionSession:
    """One completed dictation event, consumed read-only by analytics."""
    id: str
    start_time: datetime
    mode: DictationMode
    transcription_text: str
    character_count: int
    processing_time_ms: int
    metadata: SessionMetadata = field(default_factory=SessionMetadata)

    def __post_init__(self):
        if self.character_count < 0:
            raise ValueError("character_count must be >= 0")
        if self.processing_time_ms < 0:
            raise ValueError("processing_time_ms must be >= 0")
        if self.metadata.audio_length_ms < 0:
            raise ValueError("audio_length_ms must be >= 0")

    @property
    def word_count(self) -> int:
        return len(self.transcription_text.split())

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "mode": self.mode.value,
            "transcriptionText": self.transcription_text,
            "characterCount": self.character_count,
            "processingTimeMs": self.processing_time_ms,
            "metadata": {
                "audioLengthMs": self.metadata.audio_length_ms,
                "model": self.metadata.model,
                "language": self.metadata.language,
            },
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "TranscriptionSession":
        metadata = raw.get("metadata") or {}
        text = raw.get("transcriptionText", "")
        return cls(
            id=str(raw["id"]),
            start_time=datetime.fromisoformat(raw["startTime"]),
            # Records written before modes existed are dictation
            mode=DictationMode(raw.get("mode") or DictationMode.DICTATION.value),
            transcription_text=text,
            character_count=int(raw.get("characterCount", len(text))),
            processing_time_ms=int(raw.get("processingTimeMs", 0)),
            metadata=SessionMetadata(
                audio_length_ms=int(metadata.get("audioLengthMs", 0)),
                model=metadata.get("model", "unknown"),
                language=metadata.get("language", "en"),
            ),
        )


@dataclass(frozen=True)
class TranscriptionOutcome:
    """What the orchestrator hands back for one push-to-talk release.

    session is None whenever no transcript was produced; message then holds
    the text shown to the user.
    """
    session: Optional[TranscriptionSession]
    result: Optional[TranscriptionResult] = None
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.session is not None


@dataclass(frozen=True)
class SessionSavings:
    session_time_saved: float
    estimated_typing_time: float
    actual_transcription_time: float
    efficiency_multiplier: float
    characters_per_minute: float


@dataclass(frozen=True)
class CumulativeSavings:
    total_time_saved: float = 0.0
    total_sessions: int = 0
    average_efficiency: float = 1.0
    total_characters_transcribed: int = 0
    total_typing_time_saved: float = 0.0
    daily_savings: float = 0.0
    weekly_savings: float = 0.0
    monthly_savings: float = 0.0


@dataclass(frozen=True)
class DashboardStats:
    """Stats object consumed by the dashboard."""
    total_sessions: int = 0
    total_words: int = 0
    total_characters: int = 0
    average_wpm: int = 0
    estimated_time_saved_ms: float = 0.0
    streak_days: int = 0
    last_active_date: Optional[datetime] = None
    daily_time_saved: Optional[float] = None
    weekly_time_saved: Optional[float] = None
    monthly_time_saved: Optional[float] = None
    efficiency_multiplier: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalSessions": self.total_sessions,
            "totalWords": self.total_words,
            "totalCharacters": self.total_characters,
            "averageWPM": self.average_wpm,
            "estimatedTimeSavedMs": self.estimated_time_saved_ms,
            "streakDays": self.streak_days,
            "lastActiveDate": self.last_active_date.isoformat() if self.last_active_date else None,
            "dailyTimeSaved": self.daily_time_saved,
            "weeklyTimeSaved": self.weekly_time_saved,
            "monthlyTimeSaved": self.monthly_time_saved,
            "efficiencyMultiplier": self.efficiency_multiplier,
        }
