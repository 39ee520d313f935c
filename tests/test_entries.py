"""Tests for habitstats.analytics.entries -- parsing, normalization, merging."""

from datetime import date, time

import pytest

from habitstats.analytics.entries import (
    parse_date,
    parse_time,
    parse_record,
    normalize,
    values_by_date,
    distinct_dates,
    merge_sources,
)

from conftest import D0, day, make_entry, weight_record


class TestParseDate:
    def test_plain_date(self):
        assert parse_date("2024-03-04") == (date(2024, 3, 4), None)

    def test_iso_datetime_keeps_wall_clock(self):
        assert parse_date("2024-03-04T19:45:00Z") == (date(2024, 3, 4), time(19, 45))

    def test_iso_datetime_with_offset(self):
        assert parse_date("2024-03-04 06:10:00+02:00") == (date(2024, 3, 4), time(6, 10))

    def test_date_object(self):
        assert parse_date(D0) == (D0, None)

    @pytest.mark.parametrize("raw", ["2024-13-40", "not a date", "", 20240304, None])
    def test_unparsable(self, raw):
        assert parse_date(raw) is None


class TestParseTime:
    def test_hh_mm(self):
        assert parse_time("07:05") == time(7, 5)

    def test_with_seconds(self):
        assert parse_time("21:30:15") == time(21, 30, 15)

    @pytest.mark.parametrize("raw", ["late", "", "25:00", None])
    def test_unparsable(self, raw):
        assert parse_time(raw) is None


class TestParseRecord:
    def test_weight_row(self):
        entry = parse_record(weight_record(0, 80.5))
        assert entry is not None
        assert entry.date == D0
        assert entry.time == time(7, 30)
        assert entry.get("weight_kg") == 80.5
        # bookkeeping columns are neither fields nor metadata
        assert "id" not in entry.fields and "id" not in entry.meta
        assert "user_id" not in entry.meta

    def test_metadata_kept(self):
        entry = parse_record({"date": "2024-03-04", "weight_kg": 80.0, "device": "scale"})
        assert entry.meta["device"] == "scale"
        assert "device" not in entry.fields

    def test_smart_scale_measured_at(self):
        entry = parse_record({
            "measured_at": "2024-03-04T19:45:00Z",
            "weight_kg": 81.2,
            "heart_rate_bpm": None,
        })
        assert entry.date == D0
        assert entry.time == time(19, 45)
        assert entry.get("weight_kg") == 81.2
        assert "heart_rate_bpm" in entry.fields
        assert entry.get("heart_rate_bpm") is None

    def test_body_scan_segments_flattened(self):
        entry = parse_record({
            "scan_date": "2024-03-04",
            "scan_time": "08:00",
            "device": "InBody",
            "segments_json": {"fat": {"trunk": 12.5, "armL": 1.1}, "muscle": {"trunk": 25}},
        })
        assert entry.time == time(8, 0)
        assert entry.get("segments_json.fat.trunk") == 12.5
        assert entry.get("segments_json.muscle.trunk") == 25.0

    def test_checkin_row(self):
        entry = parse_record({"checkin_date": "2024-03-05", "checkin_time": "18:20", "facility": "Gym A"})
        assert entry.date == day(1)
        assert entry.time == time(18, 20)
        assert entry.meta["facility"] == "Gym A"

    def test_bool_is_not_numeric(self):
        entry = parse_record({"date": "2024-03-04", "synced": True})
        assert "synced" not in entry.fields
        assert entry.meta["synced"] is True

    def test_bad_time_keeps_entry(self):
        entry = parse_record({"date": "2024-03-04", "time": "late", "value": 1})
        assert entry is not None
        assert entry.time is None

    def test_empty_date_falls_through_to_next_key(self):
        entry = parse_record({"date": "", "measured_at": "2024-03-04T07:30:00", "weight_kg": 80.0})
        assert entry is not None
        assert entry.date == D0
        assert entry.time == time(7, 30)
        assert len(normalize([{"date": "", "measured_at": "2024-03-04T07:30:00"}])) == 1

    def test_empty_time_falls_through_to_next_key(self):
        entry = parse_record({"scan_date": "2024-03-04", "time": "", "scan_time": "08:15"})
        assert entry.time == time(8, 15)

    @pytest.mark.parametrize("record", [
        {"date": "2024-02-30", "value": 1},
        {"date": "yesterday", "value": 1},
        {"value": 1},
        {"date": None, "value": 1},
    ])
    def test_undated_record(self, record):
        assert parse_record(record) is None


class TestMetricEntry:
    def test_nan_reads_as_none(self):
        entry = make_entry(0, float("nan"))
        assert entry.get() is None

    def test_missing_field(self):
        assert make_entry(0, 1.0).get("weight_kg") is None

    def test_repr(self):
        assert "2024-03-04 07:00" in repr(make_entry(0, 1.0, at="07:00"))


class TestNormalize:
    def test_sorts_by_date_then_time(self):
        entries = [
            make_entry(2, 3.0),
            make_entry(0, 2.0, at="20:00"),
            make_entry(0, 1.0, at="06:00"),
        ]
        result = normalize(entries)
        assert [e.get() for e in result] == [1.0, 2.0, 3.0]

    def test_ties_keep_input_order(self):
        a = make_entry(0, 1.0, at="07:00")
        b = make_entry(0, 2.0, at="07:00")
        assert normalize([a, b]) == [a, b]
        assert normalize([b, a]) == [b, a]

    def test_untimed_sorts_as_midnight(self):
        timed = make_entry(0, 1.0, at="08:00")
        untimed = make_entry(0, 2.0)
        assert normalize([timed, untimed]) == [untimed, timed]

    def test_drops_unparsable_records(self):
        records = [
            {"date": "2024-03-05", "value": 2},
            {"date": "garbage", "value": 99},
            {"date": "2024-03-04", "value": 1},
            "not a record",
        ]
        result = normalize(records)
        assert [e.get() for e in result] == [1.0, 2.0]

    def test_mixed_entries_and_records(self):
        result = normalize([make_entry(1, 2.0), {"date": "2024-03-04", "value": 1}])
        assert [e.date for e in result] == [day(0), day(1)]

    def test_idempotent(self):
        entries = [make_entry(3, 1.0), make_entry(1, 2.0, at="09:00"), make_entry(1, 3.0)]
        once = normalize(entries)
        assert normalize(once) == once

    def test_does_not_mutate_input(self):
        entries = [make_entry(2, 1.0), make_entry(0, 2.0)]
        snapshot = list(entries)
        normalize(entries)
        assert entries == snapshot

    def test_empty(self):
        assert normalize([]) == []


class TestGrouping:
    def test_values_by_date_skips_nulls(self):
        entries = normalize([make_entry(0, 1.0), make_entry(0, 3.0), make_entry(1, None)])
        assert values_by_date(entries) == {day(0): [1.0, 3.0]}

    def test_distinct_dates(self):
        entries = [make_entry(2, 1.0), make_entry(0, 1.0), make_entry(2, 2.0)]
        assert distinct_dates(entries) == [day(0), day(2)]


class TestMergeSources:
    def test_secondary_overrides_and_is_averaged(self):
        manual = [weight_record(0, 80.0), weight_record(1, 81.0)]
        scale = [
            {"measured_at": f"{day(1)}T07:00:00", "weight_kg": 80.0},
            {"measured_at": f"{day(1)}T19:00:00", "weight_kg": 80.4},
            {"measured_at": f"{day(2)}T07:10:00", "weight_kg": 79.9},
            {"measured_at": f"{day(3)}T07:10:00", "weight_kg": None},
        ]
        merged = merge_sources(manual, scale, "weight_kg")

        assert [e.date for e in merged] == [day(0), day(1), day(2)]
        assert merged[0].meta["source"] == "primary"
        assert merged[1].meta["source"] == "secondary"
        assert merged[1].get("weight_kg") == pytest.approx(80.2)
        assert merged[1].time == time(7, 0)
        assert merged[2].get("weight_kg") == 79.9

    def test_primary_only(self):
        merged = merge_sources([weight_record(0, 80.0)], [], "weight_kg")
        assert len(merged) == 1
        assert merged[0].get("weight_kg") == 80.0
        assert merged[0].meta["source"] == "primary"

    def test_empty(self):
        assert merge_sources([], []) == []
