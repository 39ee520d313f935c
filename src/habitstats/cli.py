"""CLI for the habitstats analytics engine."""

from __future__ import annotations

import logging

import click

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOT_ENOUGH_DATA = "Not enough data."


def _load(file: str) -> list[dict]:
    from habitstats.loader import load_records

    try:
        return load_records(file)
    except ValueError as e:
        raise click.ClickException(str(e)) from e


def _field_option(f):
    return click.option(
        "--field", "-f", default=None,
        help="Numeric field to analyze (default: 'value' or the most common field).",
    )(f)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    envvar="HABITSTATS_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (env: HABITSTATS_LOG_LEVEL).",
)
def main(log_level: str) -> None:
    """habitstats: trends, streaks and forecasts for tracking logs."""
    logging.basicConfig(level=getattr(logging, log_level.upper()), format=LOG_FORMAT)


@main.command("summary")
@click.argument("file", type=click.Path(exists=True))
@_field_option
@click.option("--window", "-w", default=7, type=click.IntRange(min=1), help="Moving-average window (days).")
@click.option("--horizon", default=30, type=click.IntRange(min=0), help="Forecast horizon (days, 0 = off).")
@click.option("--output", "-o", default=None, help="Write summary JSON to file.")
def summary_cmd(file: str, field: str | None, window: int, horizon: int, output: str | None) -> None:
    """Print the KPI summary for a record export."""
    from habitstats.analytics.pipeline import run_pipeline

    summary = run_pipeline(_load(file), field=field, window_days=window, horizon_days=horizon)

    if summary.entry_count == 0:
        click.echo(NOT_ENOUGH_DATA)
        return

    def fmt(value: float | None, spec: str = ".2f") -> str:
        return "–" if value is None else format(value, spec)

    click.echo(f"\n{'=' * 60}")
    click.echo(f"  Summary: {summary.field} "
               f"({summary.first_date} → {summary.last_date}, {summary.entry_count} entries)")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Latest:        {fmt(summary.latest)}")
    click.echo(f"  Ø {window} days:     {fmt(summary.moving_average)}")
    click.echo(f"  Trend:         {summary.trend}")
    click.echo(f"  Weekly change: {fmt(summary.weekly_change, '+.2f')}")
    click.echo(f"  Volatility:    {fmt(summary.volatility)}")
    click.echo(f"  Min / Max:     {fmt(summary.min_value)} ({summary.min_date}) / "
               f"{fmt(summary.max_value)} ({summary.max_date})")
    click.echo(f"  Streak:        {summary.current_streak} current, "
               f"{summary.longest_streak} longest")
    click.echo(f"  Per week:      {summary.average_per_week:.1f}")
    if summary.forecast:
        last = summary.forecast[-1]
        click.echo(f"  Forecast:      {last['value']:.2f} ± {summary.forecast_daily_swing} "
                   f"on {last['date']}")
    click.echo(f"{'=' * 60}")

    if output:
        with open(output, "w") as f:
            f.write(summary.to_json())
        click.echo(f"\nSummary written to {output}")


@main.command("trend")
@click.argument("file", type=click.Path(exists=True))
@_field_option
@click.option("--window", "-w", default=7, type=click.IntRange(min=1), help="Moving-average window (days).")
def trend_cmd(file: str, field: str | None, window: int) -> None:
    """Print the moving average and trend direction."""
    from habitstats.analytics.entries import normalize
    from habitstats.analytics.pipeline import resolve_field
    from habitstats.analytics.trend import moving_average, trend_direction, volatility

    entries = normalize(_load(file))
    name = resolve_field(entries, field)
    ma = moving_average(entries, window, name)
    if not ma:
        click.echo(NOT_ENOUGH_DATA)
        return

    click.echo(f"{'date':<12} {'Ø ' + str(window) + 'd':>10}")
    for point in ma:
        click.echo(f"{point.date.isoformat():<12} {point.avg:>10.2f}")
    click.echo(f"\nTrend: {trend_direction(entries, name).value}")
    click.echo(f"Volatility (14d): {volatility(entries, field=name):.2f}")


@main.command("streaks")
@click.argument("file", type=click.Path(exists=True))
def streaks_cmd(file: str) -> None:
    """Print current/longest streaks and the rest-day histogram."""
    from habitstats.analytics.entries import normalize
    from habitstats.analytics.streaks import (
        current_streak,
        longest_streak_run,
        rest_day_distribution,
    )

    entries = normalize(_load(file))
    best = longest_streak_run(entries)
    if best is None:
        click.echo(NOT_ENOUGH_DATA)
        return

    click.echo(f"Current streak: {current_streak(entries)} day(s)")
    click.echo(f"Longest streak: {best.length} day(s) ({best.start} → {best.end})")

    gaps = rest_day_distribution(entries)
    if gaps:
        click.echo("\nRest days between active days:")
        for row in gaps:
            click.echo(f"  {row.days:>3} day(s): {row.count}")


@main.command("records")
@click.argument("file", type=click.Path(exists=True))
@_field_option
def records_cmd(file: str, field: str | None) -> None:
    """Print all-time extremes and personal records."""
    from habitstats.analytics.entries import normalize
    from habitstats.analytics.pipeline import resolve_field
    from habitstats.analytics.records import all_time_extremes, personal_records

    entries = normalize(_load(file))
    if not entries:
        click.echo(NOT_ENOUGH_DATA)
        return

    name = resolve_field(entries, field)
    extremes = all_time_extremes(entries, name)
    if extremes.min is not None and extremes.max is not None:
        click.echo(f"Min {name}: {extremes.min.value} on {extremes.min.date}")
        click.echo(f"Max {name}: {extremes.max.value} on {extremes.max.date}")

    records = personal_records(entries)
    if records.earliest is not None and records.latest is not None:
        click.echo(f"Earliest entry: {records.earliest.time.strftime('%H:%M')} "
                   f"on {records.earliest.date}")
        click.echo(f"Latest entry:   {records.latest.time.strftime('%H:%M')} "
                   f"on {records.latest.date}")
    if records.busiest_day is not None:
        click.echo(f"Busiest day:    {records.busiest_day.date} "
                   f"({records.busiest_day.count} entries)")
    if records.longest_break is not None:
        lb = records.longest_break
        click.echo(f"Longest break:  {lb.days} day(s) ({lb.start} → {lb.end})")


@main.command("forecast")
@click.argument("file", type=click.Path(exists=True))
@_field_option
@click.option("--horizon", default=30, type=click.IntRange(min=0), help="Days to project.")
@click.option("--output", "-o", default=None, help="Write forecast JSON to file.")
def forecast_cmd(file: str, field: str | None, horizon: int, output: str | None) -> None:
    """Project the linear trend forward with its ± band."""
    import json

    from habitstats.analytics.entries import normalize
    from habitstats.analytics.forecast import forecast
    from habitstats.analytics.pipeline import resolve_field

    entries = normalize(_load(file))
    name = resolve_field(entries, field)
    result = forecast(entries, horizon, name)
    if result is None:
        click.echo(NOT_ENOUGH_DATA)
        return

    click.echo(f"Trend: {result.slope:+.3f} {name}/day, band ± {result.daily_swing}")
    for p in result.points:
        click.echo(f"  {p.date.isoformat()}  {p.value:>8.2f}  [{p.lower:.2f} – {p.upper:.2f}]")

    if output:
        with open(output, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        click.echo(f"\nForecast written to {output}")


@main.command("heatmap")
@click.argument("file", type=click.Path(exists=True))
def heatmap_cmd(file: str) -> None:
    """Print the weekday distribution and 30-minute time heatmap."""
    from habitstats.analytics.aggregate import time_bucket_heatmap, weekday_distribution
    from habitstats.analytics.entries import normalize

    entries = normalize(_load(file))
    if not entries:
        click.echo(NOT_ENOUGH_DATA)
        return

    click.echo("Weekday distribution:")
    for row in weekday_distribution(entries):
        click.echo(f"  {row.day}: {row.visits:>3} {'#' * row.visits}")

    cells = time_bucket_heatmap(entries)
    if cells:
        click.echo("\nTime slots:")
        for cell in cells:
            click.echo(f"  {cell.day} {cell.slot}: {cell.count}")


@main.command("zone")
@click.argument("kind", type=click.Choice(["heart-rate", "visceral-fat"]))
@click.argument("value", type=float)
def zone_cmd(kind: str, value: float) -> None:
    """Classify a single heart-rate or visceral-fat reading."""
    from habitstats.analytics.zones import heart_rate_zone, visceral_fat_zone

    zone = heart_rate_zone(value) if kind == "heart-rate" else visceral_fat_zone(value)
    if zone is None:
        click.echo(NOT_ENOUGH_DATA)
        return
    click.echo(zone.value)


if __name__ == "__main__":
    main()
