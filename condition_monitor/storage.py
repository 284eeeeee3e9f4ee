"""
Design (storage.py)
- Purpose: Own the on-disk record logs: append a CSV row (lazy header), or rewrite the
           JSON array file through a temp-file swap so the log is never half-written.
- Inputs: Path (from get_log_path()), rendered row/object or a DeviceRecord.
- Outputs: None.
- Side effects: Creates the data directory; reads/writes/renames files.
- Errors: All I/O failures raise StoreError. Unrecognized JSON content is not an error:
          it is replaced by a fresh one-element array (logged as a warning).
- Thread-safety: No internal locking. One writer per file at a time is the caller's job.
"""

import logging
import os
import shutil
import sys
from pathlib import Path

from .codec import render_csv_row, render_json_object
from .config import (
    APPDATA_DIRNAME,
    CSV_FILENAME,
    CSV_HEADER,
    DATA_DIR_ENV,
    JSON_FILENAME,
    LOG_FORMAT_CSV,
    LOG_FORMAT_JSON,
)
from .models import DeviceRecord

logger = logging.getLogger(__name__)


class StoreError(OSError):
    """A record could not be durably written."""


def get_data_dir() -> Path:
    """
    Resolve and create the directory holding the record logs.
    Order: $CONDITION_MONITOR_DATA_DIR, then %APPDATA% on Windows, then next to the
    executable (or the project root when running from source).
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        base = Path(override)
    elif sys.platform == "win32" and os.environ.get("APPDATA"):
        base = Path(os.environ["APPDATA"]) / APPDATA_DIRNAME
    elif getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        base = Path(sys.executable).parent
    else:
        base = Path(__file__).resolve().parent.parent
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_log_path(fmt: str) -> Path:
    """Path of the record log for the given format ('csv' or 'json')."""
    if fmt == LOG_FORMAT_CSV:
        return get_data_dir() / CSV_FILENAME
    if fmt == LOG_FORMAT_JSON:
        return get_data_dir() / JSON_FILENAME
    raise ValueError(f"unknown log format: {fmt!r}")


def append_csv(path: Path, row: str) -> None:
    """
    Purpose: Append one rendered row; write the header first if the file is new.
    Side effects: Creates parent directory and file as needed.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        existed = path.exists()
        with open(path, "a", encoding="utf-8", newline="") as f:
            if not existed:
                f.write(CSV_HEADER + "\n")
            f.write(row + "\n")
    except OSError as exc:
        raise StoreError(f"unable to append to {path}: {exc}") from exc


def merge_json_array(existing: str, obj: str) -> str:
    """
    Purpose: Add one rendered object to the end of a JSON array document.
    Rules (on the content with trailing whitespace removed):
        '' or '[]'            -> '[obj]'
        starts '[' ends ']'   -> drop final ']' and append ',obj]'
        anything else         -> '[obj]' (prior content discarded)
    Only the exact text '[]' counts as empty; '[ ]' is treated as a populated
    array and yields '[ ,obj]', which is not valid JSON. The store itself never writes
    '[ ]', so this only affects hand-edited logs.
    """
    content = existing.rstrip(" \t\r\n")
    if not content or content == "[]":
        return "[" + obj + "]"
    if content.startswith("[") and content.endswith("]"):
        return content[:-1] + "," + obj + "]"
    logger.warning("Unrecognized record log content (%d chars) will be replaced", len(content))
    return "[" + obj + "]"


def _read_existing(path: Path) -> str:
    if not path.exists():
        return ""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError:
        logger.warning("Record log %s is not valid UTF-8 and will be replaced", path)
        return ""
    except OSError as exc:
        raise StoreError(f"unable to read {path}: {exc}") from exc


def replace_file(path: Path, content: str) -> None:
    """
    Purpose: Swap `content` into `path` so readers see either the old or the new file.
    Steps: write <name>.tmp and fsync; rename over the destination; if the rename fails
           (e.g. across devices) copy the temp file into place and delete it.
    """
    path = Path(path)
    temp = path.with_name(path.name + ".tmp")
    try:
        with open(temp, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
    except OSError as exc:
        temp.unlink(missing_ok=True)
        raise StoreError(f"unable to write {temp}: {exc}") from exc

    try:
        os.replace(temp, path)
    except OSError as exc:
        logger.warning("Rename %s -> %s failed (%s); copying instead", temp, path, exc)
        try:
            shutil.copyfile(temp, path)
        except OSError as copy_exc:
            raise StoreError(f"unable to replace {path}: {copy_exc}") from copy_exc
        finally:
            temp.unlink(missing_ok=True)


def append_json(path: Path, obj: str) -> None:
    """
    Purpose: Append one rendered object to the JSON array log (read, merge, swap).
    Side effects: Creates parent directory; replaces the whole file.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StoreError(f"unable to create {path.parent}: {exc}") from exc
    replace_file(path, merge_json_array(_read_existing(path), obj))


def save_record(record: DeviceRecord, path: Path, fmt: str) -> None:
    """
    Purpose: Render `record` and persist it with the strategy for `fmt`.
    Errors: ValueError for an unknown format; StoreError for I/O failures.
    """
    if fmt == LOG_FORMAT_CSV:
        append_csv(path, render_csv_row(record))
    elif fmt == LOG_FORMAT_JSON:
        append_json(path, render_json_object(record))
    else:
        raise ValueError(f"unknown log format: {fmt!r}")
    logger.info("Saved record %s (device %s) to %s", record.id, record.device_id, path)
