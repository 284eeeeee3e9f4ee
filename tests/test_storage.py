import json
import os

import pytest

from condition_monitor import storage
from condition_monitor.codec import parse_csv_line, render_json_object
from condition_monitor.config import COLUMNS, CSV_HEADER
from condition_monitor.models import DeviceRecord
from condition_monitor.storage import (
    StoreError,
    append_csv,
    append_json,
    get_log_path,
    merge_json_array,
    save_record,
)


def make_record(n: int, **overrides) -> DeviceRecord:
    base = dict(
        id=f"00000000-0000-4000-8000-{n:012d}",
        created_at="2026-10-19 08:30:00",
        operator_id="ops.1",
        device_id=f"dev-{n}",
        status="Online",
        action_type="Check",
        severity="Low",
    )
    base.update(overrides)
    return DeviceRecord(**base)


class TestCsvAppend:
    def test_header_literal(self):
        assert CSV_HEADER == (
            "id,created_at,operator_id,instance_id,app_version,device_id,device_name,"
            "status,action_type,voltage,temperature,severity,ui_latency_ms,notes"
        )

    def test_header_once_then_rows(self, tmp_path):
        path = tmp_path / "nested" / "devices.csv"
        for n in range(3):
            save_record(make_record(n, notes="a,b" if n == 1 else ""), path, "csv")

        lines = path.read_text(encoding="utf-8").split("\n")
        assert lines[0] == CSV_HEADER
        assert lines[-1] == ""  # trailing terminator
        rows = [parse_csv_line(line) for line in lines[1:-1]]
        assert [r[COLUMNS.index("device_id")] for r in rows] == ["dev-0", "dev-1", "dev-2"]
        assert rows[1][COLUMNS.index("notes")] == "a,b"

    def test_existing_file_gets_no_header(self, tmp_path):
        path = tmp_path / "devices.csv"
        path.write_text("legacy\n", encoding="utf-8")
        append_csv(path, "row")
        assert path.read_text(encoding="utf-8") == "legacy\nrow\n"

    def test_open_failure_raises_store_error(self, tmp_path):
        target = tmp_path / "is_a_dir"
        target.mkdir()
        with pytest.raises(StoreError):
            append_csv(target, "row")


class TestJsonMerge:
    @pytest.mark.parametrize("existing", ["", "   \n", "[]", "[]\r\n"])
    def test_empty_content_starts_array(self, existing):
        assert merge_json_array(existing, "{}") == "[{}]"

    def test_appends_to_existing_array(self):
        assert merge_json_array('[{"a":"1"}]\n', '{"b":"2"}') == '[{"a":"1"},{"b":"2"}]'

    def test_whitespace_inside_empty_array_is_not_treated_as_empty(self):
        # only the exact text "[]" is recognised as empty
        assert merge_json_array("[ ]", "{}") == "[ ,{}]"

    @pytest.mark.parametrize("existing", ["garbage", "{", '{"a":"1"}', "[unterminated"])
    def test_unrecognized_content_is_replaced(self, existing, caplog):
        assert merge_json_array(existing, "{}") == "[{}]"
        assert "Unrecognized" in caplog.text


class TestJsonAppend:
    def test_array_well_formed_after_every_append(self, tmp_path):
        path = tmp_path / "devices.json"
        for n in range(4):
            save_record(make_record(n), path, "json")
            data = json.loads(path.read_text(encoding="utf-8"))
            assert [d["device_id"] for d in data] == [f"dev-{i}" for i in range(n + 1)]
        assert not (tmp_path / "devices.json.tmp").exists()

    def test_corrupt_file_overwritten(self, tmp_path):
        path = tmp_path / "devices.json"
        path.write_text("not json at all", encoding="utf-8")
        save_record(make_record(1), path, "json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 1 and data[0]["device_id"] == "dev-1"

    def test_rename_failure_falls_back_to_copy(self, tmp_path, monkeypatch):
        path = tmp_path / "devices.json"
        append_json(path, render_json_object(make_record(0)))

        def fail_replace(src, dst):
            raise OSError(18, "Invalid cross-device link")

        monkeypatch.setattr(storage.os, "replace", fail_replace)
        append_json(path, render_json_object(make_record(1)))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert [d["device_id"] for d in data] == ["dev-0", "dev-1"]
        assert not (tmp_path / "devices.json.tmp").exists()

    def test_failed_temp_write_leaves_previous_content(self, tmp_path, monkeypatch):
        path = tmp_path / "devices.json"
        append_json(path, render_json_object(make_record(0)))
        before = path.read_text(encoding="utf-8")

        def fail_fsync(fd):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(storage.os, "fsync", fail_fsync)
        with pytest.raises(StoreError):
            append_json(path, render_json_object(make_record(1)))

        assert path.read_text(encoding="utf-8") == before
        assert not (tmp_path / "devices.json.tmp").exists()


class TestPaths:
    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CONDITION_MONITOR_DATA_DIR", str(tmp_path / "data"))
        assert get_log_path("csv") == tmp_path / "data" / "devices.csv"
        assert get_log_path("json") == tmp_path / "data" / "devices.json"
        assert os.path.isdir(tmp_path / "data")

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError):
            save_record(make_record(0), tmp_path / "x", "xml")
