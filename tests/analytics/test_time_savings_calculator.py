"""
Tests for TimeSavingsCalculator.

Strategy: sessions are built with explicit timestamps around a fixed
reference "now" (Wednesday 2025-06-18 15:00 UTC), so calendar windows are
deterministic. Numbers in the end-to-end scenarios are computed by hand from
the default model constants.
"""
import time
from datetime import datetime, timedelta, timezone

import pytest

from tests.session_fixture import REFERENCE_NOW, make_session
from vocalflow.analytics.TimeSavingsCalculator import (
    TimeSavingsCalculator,
    TimeSavingsModel,
    calendar_boundaries,
    format_time_savings,
    get_efficiency_message,
)
from vocalflow.types import CumulativeSavings, DictationMode


def _make_dictation(characters=400, audio_ms=4000, processing_ms=1000, **kwargs):
    return make_session(
        text="x" * characters,
        mode=DictationMode.DICTATION,
        audio_length_ms=audio_ms,
        processing_time_ms=processing_ms,
        **kwargs,
    )


def _make_command(characters=50, audio_ms=2000, processing_ms=500, **kwargs):
    return make_session(
        text="y" * characters,
        mode=DictationMode.COMMAND,
        audio_length_ms=audio_ms,
        processing_time_ms=processing_ms,
        **kwargs,
    )


@pytest.fixture
def eastern_host_clock(monkeypatch):
    """Host local time set to US Eastern, which enters DST on 2025-03-09."""
    if not hasattr(time, "tzset"):
        pytest.skip("host timezone cannot be switched on this platform")
    monkeypatch.setenv("TZ", "EST5EDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


# ---------------------------------------------------------------------------
# Per-session model
# ---------------------------------------------------------------------------

class TestSessionSavings:

    def test_dictation_scenario(self):
        savings = TimeSavingsCalculator().calculate_session_savings(_make_dictation())

        assert savings.estimated_typing_time == pytest.approx(187200)
        assert savings.actual_transcription_time == 5000
        assert savings.session_time_saved == pytest.approx(182200)
        assert savings.efficiency_multiplier == pytest.approx(37.44)
        assert savings.characters_per_minute == pytest.approx(4800)

    def test_command_scenario(self):
        savings = TimeSavingsCalculator().calculate_session_savings(_make_command())

        assert savings.estimated_typing_time == pytest.approx(90500)
        assert savings.actual_transcription_time == 2500
        assert savings.session_time_saved == pytest.approx(88000)

    def test_command_complexity_is_capped(self):
        calculator = TimeSavingsCalculator()

        assert calculator.calculate_traditional_workflow_time(50000) == pytest.approx(210000)

    def test_saving_is_never_negative(self):
        session = _make_dictation(characters=5, audio_ms=30000, processing_ms=5000)

        savings = TimeSavingsCalculator().calculate_session_savings(session)

        assert savings.session_time_saved == 0
        assert savings.efficiency_multiplier < 1

    def test_zero_actual_time_has_neutral_efficiency(self):
        session = _make_dictation(characters=100, audio_ms=0, processing_ms=0)

        savings = TimeSavingsCalculator().calculate_session_savings(session)

        assert savings.efficiency_multiplier == 1
        assert savings.characters_per_minute == 0
        assert savings.session_time_saved == pytest.approx(savings.estimated_typing_time)

    @pytest.mark.parametrize("characters", [0, 1, 199, 200, 1000, 12345])
    def test_typing_time_formula(self, characters):
        expected = characters / 200 * 60000 * 1.56

        assert TimeSavingsCalculator().calculate_typing_time(characters) == pytest.approx(expected)

    def test_model_constants_come_from_config(self):
        model = TimeSavingsModel.from_config({"typing_cpm": 400.0, "max_events": 10})
        calculator = TimeSavingsCalculator(model)

        assert calculator.calculate_typing_time(400) == pytest.approx(93600)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

class TestCumulativeSavings:

    def test_empty_sessions_give_neutral_defaults(self):
        savings = TimeSavingsCalculator().calculate_cumulative_savings([], REFERENCE_NOW)

        assert savings == CumulativeSavings()
        assert savings.average_efficiency == 1.0

    def test_total_is_sum_of_sessions(self):
        calculator = TimeSavingsCalculator()
        sessions = [_make_dictation(session_id="a"), _make_command(session_id="b")]

        savings = calculator.calculate_cumulative_savings(sessions, REFERENCE_NOW)

        assert savings.total_time_saved == pytest.approx(182200 + 88000)
        assert savings.total_sessions == 2
        assert savings.total_characters_transcribed == 450
        assert savings.total_typing_time_saved == pytest.approx(187200 + 90500)
        assert savings.average_efficiency == pytest.approx((37.44 + 90500 / 2500) / 2)

    def test_calendar_windows_are_nested(self):
        calculator = TimeSavingsCalculator()
        today = _make_dictation(session_id="today", start_time=REFERENCE_NOW - timedelta(hours=1))
        this_week = _make_dictation(session_id="week", start_time=REFERENCE_NOW - timedelta(days=2))
        this_month = _make_dictation(session_id="month", start_time=REFERENCE_NOW - timedelta(days=10))
        earlier = _make_dictation(session_id="old", start_time=REFERENCE_NOW - timedelta(days=40))

        savings = calculator.calculate_cumulative_savings([today, this_week, this_month, earlier], REFERENCE_NOW)

        assert savings.daily_savings == pytest.approx(182200)
        assert savings.weekly_savings == pytest.approx(2 * 182200)
        assert savings.monthly_savings == pytest.approx(3 * 182200)
        assert savings.total_time_saved == pytest.approx(4 * 182200)

    def test_week_starts_on_sunday(self):
        boundaries = calendar_boundaries(REFERENCE_NOW)

        assert boundaries['day'].day == 18
        assert boundaries['week'].day == 15
        assert boundaries['week'].weekday() == 6
        assert boundaries['month'].day == 1


    def test_week_window_uses_local_midnight_across_dst(self, eastern_host_clock):
        calculator = TimeSavingsCalculator()
        # Monday after the switch; the week began Sunday 00:00 EST (05:00 UTC)
        now = datetime(2025, 3, 10, 12, 0)
        saturday_night = _make_dictation(session_id="sat", start_time=datetime(2025, 3, 9, 4, 30, tzinfo=timezone.utc))
        sunday_morning = _make_dictation(session_id="sun", start_time=datetime(2025, 3, 9, 5, 30, tzinfo=timezone.utc))

        savings = calculator.calculate_cumulative_savings([saturday_night, sunday_morning], now)

        assert savings.weekly_savings == pytest.approx(182200)
        assert savings.daily_savings == 0


class TestProjectionsAndInsights:

    def test_projection_scales_weekly_average(self):
        calculator = TimeSavingsCalculator()
        sessions = [_make_dictation(start_time=REFERENCE_NOW)]

        assert calculator.calculate_projected_savings(sessions, 'week', REFERENCE_NOW) == pytest.approx(182200)
        assert calculator.calculate_projected_savings(sessions, 'year', REFERENCE_NOW) == \
            pytest.approx(182200 / 7 * 365)

    def test_projection_without_sessions_is_zero(self):
        assert TimeSavingsCalculator().calculate_projected_savings([], 'month', REFERENCE_NOW) == 0

    def test_insights_for_empty_history(self):
        calculator = TimeSavingsCalculator()

        assert calculator.get_productivity_insights(CumulativeSavings()) == [
            "Start dictating to see your time savings!"
        ]

    def test_insights_for_one_session(self):
        calculator = TimeSavingsCalculator()
        savings = calculator.calculate_cumulative_savings([_make_dictation()], REFERENCE_NOW)

        assert calculator.get_productivity_insights(savings) == [
            "Saved 3 minutes this week",
            "37x faster than typing",
        ]

    def test_insights_fallback(self):
        savings = CumulativeSavings(total_sessions=1, average_efficiency=1.0)

        assert TimeSavingsCalculator().get_productivity_insights(savings) == [
            "Keep dictating to unlock productivity insights!"
        ]


class TestFormatting:

    @pytest.mark.parametrize("ms,expected", [
        (1000, "1 second"),
        (45000, "45 seconds"),
        (180000, "3 minutes"),
        (3600000, "1 hour"),
        (5400000, "1.5 hours"),
        (172800000, "2 days"),
    ])
    def test_format_time_savings(self, ms, expected):
        assert format_time_savings(ms) == expected

    @pytest.mark.parametrize("efficiency,expected", [
        (37.44, "37x faster than typing"),
        (2.54, "2.5x faster than typing"),
        (1.25, "25% faster than typing"),
        (1.0, "Building efficiency..."),
    ])
    def test_efficiency_message(self, efficiency, expected):
        assert get_efficiency_message(efficiency) == expected
