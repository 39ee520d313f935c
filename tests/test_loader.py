"""Tests for habitstats.loader."""

import json
import logging

import pytest

from habitstats.loader import load_records

from conftest import weight_record, write_jsonl


class TestLoadRecords:
    def test_jsonl(self, tmp_path):
        path = write_jsonl(tmp_path / "weights.jsonl", [weight_record(0, 80.0), weight_record(1, 80.5)])
        records = load_records(path)
        assert len(records) == 2
        assert records[1]["weight_kg"] == 80.5

    def test_jsonl_skips_bad_lines(self, tmp_path, caplog):
        path = tmp_path / "mixed.jsonl"
        path.write_text(
            json.dumps(weight_record(0, 80.0)) + "\n"
            "\n"
            "{not json\n"
            "[1, 2]\n"
            + json.dumps(weight_record(1, 81.0)) + "\n"
        )
        with caplog.at_level(logging.WARNING, logger="habitstats.loader"):
            records = load_records(path)
        assert [r["weight_kg"] for r in records] == [80.0, 81.0]
        assert "mixed.jsonl:3" in caplog.text
        assert "mixed.jsonl:4" in caplog.text

    def test_json_list(self, tmp_path):
        path = tmp_path / "weights.json"
        path.write_text(json.dumps([weight_record(0, 80.0), "junk"]))
        records = load_records(str(path))
        assert len(records) == 1

    def test_json_envelope(self, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps({"records": [weight_record(0, 80.0)], "exported_at": "2024-03-10"}))
        assert load_records(path)[0]["id"] == "w-0"

    def test_json_wrong_shape(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"weight_kg": 80.0}))
        with pytest.raises(ValueError):
            load_records(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "nope.jsonl")
