"""
TimeSavingsCalculator - productivity metrics derived from session records.

Every calculation is a pure function of the sessions, the model constants and
an explicit "now"; nothing is cached.

Baselines:
- dictation: typing time at the model's typing speed, inflated by thinking
  and editing overhead (1.3 * 1.2 by default)
- command: the manual workflow of doing the same through an AI tool in a
  browser, a fixed overhead plus a capped per-character complexity term
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Literal, Optional

from vocalflow.types import CumulativeSavings, DictationMode, SessionSavings, TranscriptionSession

logger = logging.getLogger(__name__)

ProjectionTimeframe = Literal['week', 'month', 'year']

_PROJECTION_DAYS = {'week': 7, 'month': 30, 'year': 365}

_MS_PER_MINUTE = 60 * 1000
_MS_PER_HOUR = 60 * _MS_PER_MINUTE
_MS_PER_DAY = 24 * _MS_PER_HOUR

# Sessions saving more than this are logged for inspection
_SUSPICIOUS_SAVING_MS = _MS_PER_HOUR


@dataclass(frozen=True)
class TimeSavingsModel:
    """Heuristic constants of the time-savings model.

    None of these are empirically calibrated; they are configuration.
    """
    typing_cpm: float = 200.0                 # 40 WPM * 5 chars/word
    thinking_multiplier: float = 1.3
    editing_multiplier: float = 1.2
    workflow_base_overhead_ms: float = 90000.0
    workflow_ms_per_character: float = 10.0
    workflow_complexity_cap_ms: float = 120000.0
    chars_per_page: int = 2000
    insight_efficiency_threshold: float = 3.0
    insight_characters_threshold: int = 10000
    insight_sessions_threshold: int = 50

    @property
    def manual_multiplier(self) -> float:
        return self.thinking_multiplier * self.editing_multiplier

    @classmethod
    def from_config(cls, section: Optional[Dict[str, Any]]) -> "TimeSavingsModel":
        if not section:
            return cls()
        known = cls.__dataclass_fields__.keys()
        return cls(**{key: value for key, value in section.items() if key in known})


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plural(value: float, unit: str) -> str:
    return f"{value:g} {unit}{'' if value == 1 else 's'}"


def format_time_savings(milliseconds: float) -> str:
    """Human duration: "45 seconds", "3 minutes", "1.5 hours", "2 days"."""
    if milliseconds < _MS_PER_MINUTE:
        return _plural(_round_half_up(milliseconds / 1000), "second")
    if milliseconds < _MS_PER_HOUR:
        return _plural(_round_half_up(milliseconds / _MS_PER_MINUTE), "minute")
    if milliseconds < _MS_PER_DAY:
        return _plural(_round_half_up(milliseconds / _MS_PER_HOUR * 10) / 10, "hour")
    return _plural(_round_half_up(milliseconds / _MS_PER_DAY * 10) / 10, "day")


def get_efficiency_message(efficiency: float) -> str:
    if efficiency >= 5:
        return f"{_round_half_up(efficiency)}x faster than typing"
    if efficiency >= 2:
        return f"{_round_half_up(efficiency * 10) / 10:g}x faster than typing"
    if efficiency > 1:
        return f"{_round_half_up((efficiency - 1) * 100)}% faster than typing"
    return "Building efficiency..."


def as_local(moment: datetime, reference: datetime) -> datetime:
    """Express moment in the timezone convention of reference.

    A naive reference means host local time: aware moments are converted
    with the offset in force at that instant, so DST changes between the
    moment and the reference do not shift it.
    """
    if reference.tzinfo is not None:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=reference.tzinfo)
        return moment.astimezone(reference.tzinfo)
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def calendar_boundaries(now: datetime) -> Dict[str, datetime]:
    """Start of today, of this week (Sunday) and of this month, in now's timezone."""
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): Monday=0 ... Sunday=6
    week_start = today_start - timedelta(days=(today_start.weekday() + 1) % 7)
    month_start = today_start.replace(day=1)
    return {'day': today_start, 'week': week_start, 'month': month_start}


class TimeSavingsCalculator:
    """
    Args:
        model: Constants of the savings model
    """

    def __init__(self, model: Optional[TimeSavingsModel] = None) -> None:
        self.model = model or TimeSavingsModel()

    def calculate_typing_time(self, character_count: int) -> float:
        base_ms = (character_count / self.model.typing_cpm) * _MS_PER_MINUTE
        return base_ms * self.model.manual_multiplier

    def calculate_traditional_workflow_time(self, character_count: int) -> float:
        complexity_ms = min(character_count * self.model.workflow_ms_per_character,
                            self.model.workflow_complexity_cap_ms)
        return self.model.workflow_base_overhead_ms + complexity_ms

    def calculate_session_savings(self, session: TranscriptionSession) -> SessionSavings:
        character_count = session.character_count
        if session.mode == DictationMode.COMMAND:
            baseline = self.calculate_traditional_workflow_time(character_count)
        else:
            baseline = self.calculate_typing_time(character_count)

        actual = session.metadata.audio_length_ms + session.processing_time_ms
        saved = max(0.0, baseline - actual)

        if actual > 0:
            efficiency = baseline / actual
            characters_per_minute = character_count / (actual / _MS_PER_MINUTE)
        else:
            efficiency = 1.0
            characters_per_minute = 0.0

        return SessionSavings(
            session_time_saved=saved,
            estimated_typing_time=baseline,
            actual_transcription_time=actual,
            efficiency_multiplier=efficiency,
            characters_per_minute=characters_per_minute,
        )

    def calculate_cumulative_savings(
        self,
        sessions: Iterable[TranscriptionSession],
        now: datetime
    ) -> CumulativeSavings:
        """
        Aggregate savings over sessions.

        Calendar windows are cumulative from their boundary up to now, so a
        session counted today is also counted this week and this month.

        Args:
            sessions: Session records
            now: Reference wall-clock time for the calendar windows
        """
        boundaries = calendar_boundaries(now)

        total_saved = 0.0
        total_baseline = 0.0
        total_characters = 0
        total_efficiency = 0.0
        daily = weekly = monthly = 0.0
        count = 0

        for session in sessions:
            savings = self.calculate_session_savings(session)
            count += 1

            if savings.session_time_saved > _SUSPICIOUS_SAVING_MS:
                logger.debug("TimeSavingsCalculator: session %s mode=%s chars=%d baseline=%.0f actual=%.0f",
                             session.id, session.mode.value, session.character_count,
                             savings.estimated_typing_time, savings.actual_transcription_time)

            total_saved += savings.session_time_saved
            total_baseline += savings.estimated_typing_time
            total_characters += session.character_count
            total_efficiency += savings.efficiency_multiplier

            started = as_local(session.start_time, now)
            if started >= boundaries['day']:
                daily += savings.session_time_saved
            if started >= boundaries['week']:
                weekly += savings.session_time_saved
            if started >= boundaries['month']:
                monthly += savings.session_time_saved

        return CumulativeSavings(
            total_time_saved=total_saved,
            total_sessions=count,
            average_efficiency=total_efficiency / count if count else 1.0,
            total_characters_transcribed=total_characters,
            total_typing_time_saved=total_baseline,
            daily_savings=daily,
            weekly_savings=weekly,
            monthly_savings=monthly,
        )

    def calculate_projected_savings(
        self,
        sessions: List[TranscriptionSession],
        timeframe: ProjectionTimeframe,
        now: datetime
    ) -> float:
        """Linear projection from this week's average daily saving."""
        if not sessions or timeframe not in _PROJECTION_DAYS:
            return 0.0
        savings = self.calculate_cumulative_savings(sessions, now)
        return savings.weekly_savings / 7 * _PROJECTION_DAYS[timeframe]

    def get_productivity_insights(self, savings: CumulativeSavings) -> List[str]:
        if savings.total_sessions == 0:
            return ["Start dictating to see your time savings!"]

        insights = []
        if savings.weekly_savings > 0:
            insights.append(f"Saved {format_time_savings(savings.weekly_savings)} this week")
        if savings.average_efficiency > self.model.insight_efficiency_threshold:
            insights.append(get_efficiency_message(savings.average_efficiency))
        if savings.total_characters_transcribed > self.model.insight_characters_threshold:
            pages = _round_half_up(savings.total_characters_transcribed / self.model.chars_per_page)
            insights.append(f"Transcribed {pages} pages of text")
        if savings.total_sessions > self.model.insight_sessions_threshold:
            insights.append(f"Eliminated {savings.total_sessions} manual workflows")

        return insights or ["Keep dictating to unlock productivity insights!"]
