"""Analytics engine for timestamped habit and health measurements.

Modules:
    entries    -- MetricEntry, record parsing, normalization, source merging
    aggregate  -- Daily/weekly/monthly buckets, weekday and time-slot heatmaps
    trend      -- Moving average, trend direction, volatility, weekly deltas
    streaks    -- Current/longest streaks, rest-day distribution
    records    -- Value extremes, check-in time records, busiest day, breaks
    forecast   -- Linear trend projection with a residual band
    zones      -- Heart-rate / visceral-fat zones, morning vs evening
    summary    -- KPI summary aggregation
    pipeline   -- Raw records -> KPI summary
"""

from habitstats.analytics.entries import (
    MetricEntry,
    parse_record,
    normalize,
    merge_sources,
)
from habitstats.analytics.aggregate import (
    daily_average,
    weekly_count,
    monthly_count,
    monthly_average,
    month_summary,
    months,
    count_in_month,
    average_per_week,
    rolling_weekly_average,
    weekday_distribution,
    time_bucket_heatmap,
    time_of_day_distribution,
    most_common_time_of_day,
    DailyValue,
)
from habitstats.analytics.trend import (
    moving_average,
    trend_direction,
    volatility,
    weekly_change,
    week_trend,
    latest_value,
    trend_diff,
    TrendDirection,
)
from habitstats.analytics.streaks import (
    current_streak,
    longest_streak,
    longest_streak_run,
    rest_day_distribution,
    Streak,
)
from habitstats.analytics.records import (
    all_time_extremes,
    earliest_checkin,
    latest_checkin,
    busiest_day,
    longest_break,
    personal_records,
    PersonalRecords,
)
from habitstats.analytics.forecast import forecast, regression_line, Forecast, ForecastPoint
from habitstats.analytics.zones import (
    heart_rate_zone,
    visceral_fat_zone,
    morning_vs_evening,
    HeartRateZone,
    VisceralFatZone,
)
from habitstats.analytics.summary import build_summary, MetricSummary
from habitstats.analytics.pipeline import run_pipeline

__all__ = [
    # entries
    "MetricEntry",
    "parse_record",
    "normalize",
    "merge_sources",
    # aggregate
    "daily_average",
    "weekly_count",
    "monthly_count",
    "monthly_average",
    "month_summary",
    "months",
    "count_in_month",
    "average_per_week",
    "rolling_weekly_average",
    "weekday_distribution",
    "time_bucket_heatmap",
    "time_of_day_distribution",
    "most_common_time_of_day",
    "DailyValue",
    # trend
    "moving_average",
    "trend_direction",
    "volatility",
    "weekly_change",
    "week_trend",
    "latest_value",
    "trend_diff",
    "TrendDirection",
    # streaks
    "current_streak",
    "longest_streak",
    "longest_streak_run",
    "rest_day_distribution",
    "Streak",
    # records
    "all_time_extremes",
    "earliest_checkin",
    "latest_checkin",
    "busiest_day",
    "longest_break",
    "personal_records",
    "PersonalRecords",
    # forecast
    "forecast",
    "regression_line",
    "Forecast",
    "ForecastPoint",
    # zones
    "heart_rate_zone",
    "visceral_fat_zone",
    "morning_vs_evening",
    "HeartRateZone",
    "VisceralFatZone",
    # summary / pipeline
    "build_summary",
    "MetricSummary",
    "run_pipeline",
]
