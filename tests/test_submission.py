import json
import threading

import pytest

from condition_monitor.models import Identity, SubmissionState
from condition_monitor.storage import StoreError
from condition_monitor.submission import SubmissionTask

VALUES = {"operator_id": "ops.1", "device_id": "dev-7", "status": "Online"}


def run(task: SubmissionTask) -> None:
    task.start()
    assert task.wait(timeout=5)


class Collector:
    def __init__(self):
        self.results = []
        self.threads = []

    def __call__(self, result):
        self.results.append(result)
        self.threads.append(threading.current_thread())


def test_minimal_record_is_only_entry_in_json_log(tmp_path):
    path = tmp_path / "devices.json"
    done = Collector()
    task = SubmissionTask(VALUES, path, "json", done)
    run(task)

    assert len(done.results) == 1
    result = done.results[0]
    assert result.ok and result.error is None
    assert task.state is SubmissionState.SUCCEEDED

    data = json.loads(path.read_text(encoding="utf-8"))
    assert len(data) == 1
    assert data[0]["id"] == result.record.id
    assert data[0]["created_at"] == result.record.created_at
    assert data[0]["operator_id"] == "ops.1"
    assert data[0]["device_id"] == "dev-7"
    assert data[0]["status"] == "Online"


def test_minimal_record_is_only_row_in_csv_log(tmp_path):
    path = tmp_path / "devices.csv"
    done = Collector()
    run(SubmissionTask(VALUES, path, "csv", done))

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith(done.results[0].record.id + ",")


def test_sequential_submissions_keep_order(tmp_path):
    path = tmp_path / "devices.json"
    first, second = Collector(), Collector()
    run(SubmissionTask(dict(VALUES, device_id="first"), path, "json", first))
    run(SubmissionTask(dict(VALUES, device_id="second"), path, "json", second))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [d["device_id"] for d in data] == ["first", "second"]
    assert first.results[0].record.id != second.results[0].record.id


def test_write_uses_identity_from_generation(tmp_path):
    written = []
    identity = Identity(id="11111111-2222-4333-8444-555555555555", created_at="2026-10-19 09:00:00")
    done = Collector()
    task = SubmissionTask(
        VALUES, tmp_path / "x.csv", "csv", done,
        identity_factory=lambda: identity,
        writer=lambda record, path, fmt: written.append(record),
    )
    run(task)
    assert written[0].id == identity.id
    assert written[0].created_at == identity.created_at


def test_writer_waits_for_identity(tmp_path):
    release = threading.Event()
    order = []

    def slow_identity():
        release.wait(5)
        order.append("identity")
        return Identity(id="id", created_at="ts")

    def writer(record, path, fmt):
        order.append("write")

    task = SubmissionTask(VALUES, tmp_path / "x.csv", "csv", Collector(),
                          identity_factory=slow_identity, writer=writer)
    task.start()  # returns without blocking on identity generation
    assert not task.wait(timeout=0.1)
    assert task.state is SubmissionState.GENERATING_IDENTITY
    release.set()
    assert task.wait(timeout=5)
    assert order == ["identity", "write"]


def test_store_failure_reported_once(tmp_path):
    def failing_writer(record, path, fmt):
        raise StoreError("disk full")

    done = Collector()
    task = SubmissionTask(VALUES, tmp_path / "x.json", "json", done, writer=failing_writer)
    run(task)

    assert len(done.results) == 1
    assert not done.results[0].ok
    assert isinstance(done.results[0].error, StoreError)
    assert task.state is SubmissionState.FAILED


def test_identity_failure_reported(tmp_path):
    def broken_identity():
        raise RuntimeError("no entropy")

    done = Collector()
    run(SubmissionTask(VALUES, tmp_path / "x.json", "json", done, identity_factory=broken_identity))
    assert not done.results[0].ok
    assert done.results[0].record is None
    assert not (tmp_path / "x.json").exists()


def test_completion_handed_to_dispatch(tmp_path):
    queued = []
    done = Collector()
    task = SubmissionTask(VALUES, tmp_path / "x.csv", "csv", done, dispatch=queued.append)
    task.start()

    for _ in range(50):
        if queued:
            break
        threading.Event().wait(0.1)
    assert len(queued) == 1
    assert done.results == []  # not invoked inline on the writer thread

    queued[0]()  # the caller's thread drains its queue
    assert task.wait(timeout=1)
    assert len(done.results) == 1
    assert done.threads[0] is threading.current_thread()


def test_cannot_start_twice(tmp_path):
    task = SubmissionTask(VALUES, tmp_path / "x.csv", "csv", Collector())
    run(task)
    with pytest.raises(RuntimeError):
        task.start()


def test_failed_dispatch_still_delivers_once(tmp_path):
    def closed_loop(fn):
        raise RuntimeError("main thread is not in main loop")

    done = Collector()
    task = SubmissionTask(VALUES, tmp_path / "x.csv", "csv", done, dispatch=closed_loop)
    run(task)

    assert len(done.results) == 1
    assert done.results[0].ok
    assert task.state is SubmissionState.SUCCEEDED


def test_invalid_values_rejected_before_any_write(tmp_path):
    written = []
    done = Collector()
    task = SubmissionTask(
        {"operator_id": "bad id!", "device_id": "", "voltage": "abc"},
        tmp_path / "x.json", "json", done,
        writer=lambda record, path, fmt: written.append(record),
    )
    with pytest.raises(ValueError) as excinfo:
        task.start()

    message = str(excinfo.value)
    assert "Operator ID contains invalid characters" in message
    assert "Device ID is required" in message
    assert "Voltage must be a valid number" in message
    assert task.state is SubmissionState.IDLE
    assert not task.wait(timeout=0.2)
    assert written == [] and done.results == []
    assert not (tmp_path / "x.json").exists()
