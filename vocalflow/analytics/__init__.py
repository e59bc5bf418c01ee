"""Analytics subsystem - time-savings model, dashboard stats and session storage."""
from vocalflow.analytics.TimeSavingsCalculator import (
    TimeSavingsCalculator,
    TimeSavingsModel,
    format_time_savings,
    get_efficiency_message
)
from vocalflow.analytics.StatsAggregator import StatsAggregator
from vocalflow.analytics.AnalyticsStore import AnalyticsStore

__all__ = [
    'TimeSavingsCalculator',
    'TimeSavingsModel',
    'format_time_savings',
    'get_efficiency_message',
    'StatsAggregator',
    'AnalyticsStore'
]
