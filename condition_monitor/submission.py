"""
Background submission worker.

Design:
- One SubmissionTask per "Add Device" press; the caller's thread never blocks.
- Two threads per submission:
    1) identity thread: generate (id, created_at) and resolve a Future.
    2) writer thread: wait on that Future (join point), build the record, write it.
- Completion: exactly one SubmissionResult is delivered to on_complete, through
  `dispatch` when given (e.g. Tk.after on the UI thread), else inline on the writer thread.
- State: IDLE -> GENERATING_IDENTITY -> WRITING -> SUCCEEDED | FAILED.
- No cancellation, no timeout. One submission in flight per log file is the
  caller's responsibility (the UI disables its button meanwhile).
- Methods:
    start(): check every field chain, then launch the threads (a task can be started once)
    wait(): block until completion was delivered (tests and CLI tools)
"""

import logging
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Mapping, Optional

from .codec import generate_identity
from .models import DeviceRecord, Identity, SubmissionResult, SubmissionState
from .storage import save_record
from .validators import build_record, validate_form

logger = logging.getLogger(__name__)


class SubmissionTask:
    def __init__(
        self,
        values: Mapping[str, str],
        path: Path,
        fmt: str,
        on_complete: Callable[[SubmissionResult], None],
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
        identity_factory: Callable[[], Identity] = generate_identity,
        writer: Callable[[DeviceRecord, Path, str], None] = save_record,
    ):
        self.values = dict(values)
        self.path = Path(path)
        self.fmt = fmt
        self.on_complete = on_complete
        self.dispatch = dispatch
        self.identity_factory = identity_factory
        self.writer = writer
        self._lock = threading.Lock()
        self._state = SubmissionState.IDLE
        self._identity: Future = Future()
        self._done = threading.Event()

    @property
    def state(self) -> SubmissionState:
        with self._lock:
            return self._state

    def _set_state(self, state: SubmissionState) -> None:
        with self._lock:
            self._state = state

    def start(self) -> None:
        """
        Purpose: Launch identity generation and the writer.
        Errors: RuntimeError if already started; ValueError if any field fails its chain
                (nothing is started and the task stays IDLE).
        """
        errors = validate_form(self.values)
        with self._lock:
            if self._state is not SubmissionState.IDLE:
                raise RuntimeError("submission already started")
            if errors:
                raise ValueError("invalid fields: " + "; ".join(errors.values()))
            self._state = SubmissionState.GENERATING_IDENTITY
        threading.Thread(target=self._generate_identity, name="identity", daemon=True).start()
        threading.Thread(target=self._write, name="writer", daemon=True).start()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """True once the completion callback has been handed off."""
        return self._done.wait(timeout)

    def _generate_identity(self) -> None:
        try:
            self._identity.set_result(self.identity_factory())
        except Exception as exc:
            self._identity.set_exception(exc)

    def _write(self) -> None:
        record = None
        try:
            identity = self._identity.result()
            self._set_state(SubmissionState.WRITING)
            record = build_record(self.values, identity)
            self.writer(record, self.path, self.fmt)
        except Exception as exc:
            logger.exception("Submission to %s failed", self.path)
            self._set_state(SubmissionState.FAILED)
            result = SubmissionResult(ok=False, record=record, path=self.path, error=exc)
        else:
            self._set_state(SubmissionState.SUCCEEDED)
            result = SubmissionResult(ok=True, record=record, path=self.path)
        self._deliver(result)

    def _deliver(self, result: SubmissionResult) -> None:
        def fire() -> None:
            try:
                self.on_complete(result)
            except Exception:
                logger.exception("Submission completion callback raised")
            finally:
                self._done.set()

        if self.dispatch is None:
            fire()
            return
        try:
            self.dispatch(fire)
        except Exception:
            # e.g. Tk main loop already gone; deliver on this thread instead
            logger.exception("Completion dispatch failed; delivering inline")
            fire()
