from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from vocalflow.analytics.TimeSavingsCalculator import TimeSavingsCalculator, as_local
from vocalflow.types import DashboardStats, TranscriptionSession


class StatsAggregator:
    """Maps session records onto the dashboard stats contract."""

    def __init__(self, calculator: Optional[TimeSavingsCalculator] = None) -> None:
        self._calculator = calculator or TimeSavingsCalculator()

    def build_stats(self, sessions: Sequence[TranscriptionSession], now: datetime) -> DashboardStats:
        if not sessions:
            return DashboardStats()

        savings = self._calculator.calculate_cumulative_savings(sessions, now)

        total_words = sum(session.word_count for session in sessions)
        total_audio_ms = sum(session.metadata.audio_length_ms for session in sessions)
        average_wpm = int(round(total_words / total_audio_ms * 60000)) if total_audio_ms > 0 else 0

        local_starts = [as_local(session.start_time, now) for session in sessions]

        return DashboardStats(
            total_sessions=savings.total_sessions,
            total_words=total_words,
            total_characters=savings.total_characters_transcribed,
            average_wpm=average_wpm,
            estimated_time_saved_ms=savings.total_time_saved,
            streak_days=self.streak_days([started.date() for started in local_starts], now.date()),
            last_active_date=max(local_starts),
            daily_time_saved=savings.daily_savings,
            weekly_time_saved=savings.weekly_savings,
            monthly_time_saved=savings.monthly_savings,
            efficiency_multiplier=savings.average_efficiency,
        )

    @staticmethod
    def streak_days(active_days: List[date], today: date) -> int:
        """Consecutive active days ending today, or yesterday if today has no session yet."""
        days = set(active_days)
        cursor = today if today in days else today - timedelta(days=1)
        streak = 0
        while cursor in days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak
