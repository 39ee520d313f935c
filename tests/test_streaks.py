"""Tests for habitstats.analytics.streaks."""

from habitstats.analytics.streaks import (
    current_streak,
    longest_streak,
    longest_streak_run,
    rest_day_distribution,
)

from conftest import day, make_entry, make_days


class TestStreaks:
    def test_five_days_gap_then_one(self):
        entries = make_days([0, 1, 2, 3, 4, 7])
        assert longest_streak(entries) == 5
        assert current_streak(entries) == 1

    def test_multiple_entries_per_day_count_once(self):
        entries = [make_entry(0, 1.0, at="07:00"), make_entry(0, 1.0, at="18:00"), make_entry(1, 1.0)]
        assert longest_streak(entries) == 2
        assert current_streak(entries) == 2

    def test_input_order_irrelevant(self):
        entries = make_days([4, 2, 3, 0, 1])
        assert longest_streak(entries) == 5
        assert current_streak(entries) == 5

    def test_longest_run_bounds(self):
        run = longest_streak_run(make_days([0, 1, 2, 3, 4, 7]))
        assert (run.start, run.end, run.length) == (day(0), day(4), 5)

    def test_tie_goes_to_earliest_run(self):
        run = longest_streak_run(make_days([0, 1, 5, 6, 10]))
        assert run.start == day(0)
        assert run.length == 2

    def test_current_never_exceeds_longest(self):
        for offsets in ([0], [0, 2], [0, 1, 2, 5, 6], [0, 3, 4, 5, 6]):
            entries = make_days(offsets)
            assert 0 <= current_streak(entries) <= longest_streak(entries)

    def test_adding_a_day_never_shrinks_longest(self):
        base = make_days([0, 1, 3])
        assert longest_streak(base + make_days([2])) >= longest_streak(base)
        assert longest_streak(base + make_days([10])) >= longest_streak(base)


class TestAsOf:
    def test_last_entry_today(self):
        assert current_streak(make_days([0, 1, 2]), as_of=day(2)) == 3

    def test_last_entry_yesterday(self):
        assert current_streak(make_days([0, 1, 2]), as_of=day(3)) == 3

    def test_broken_streak(self):
        assert current_streak(make_days([0, 1, 2]), as_of=day(4)) == 0


class TestRestDayDistribution:
    def test_histogram(self):
        result = rest_day_distribution(make_days([0, 1, 2, 4, 7]))
        assert [(g.days, g.count) for g in result] == [(0, 2), (1, 1), (2, 1)]

    def test_single_day(self):
        assert rest_day_distribution(make_days([0])) == []
