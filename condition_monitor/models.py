"""
Design (models.py)
- Purpose: Define simple, typed data structures for domain entities (DeviceRecord,
           validation and submission results).
- Inputs: Field values (str).
- Outputs: Dataclass instances.
- Side effects: None.
- Thread-safety: Frozen dataclasses; safe to hand between threads.
"""

from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Dict, Optional


@dataclass(frozen=True)
class ValidationResult:
    """
    Design (ValidationResult)
    - Purpose: Outcome of one field constraint; either valid or invalid with a message.
    - Fields:
        is_valid: True when the constraint passed.
        message: Operator-facing text ('' when valid).
    """
    is_valid: bool
    message: str = ""

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(True, "")

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(False, message)


@dataclass(frozen=True)
class Identity:
    """Generated id and creation timestamp for one record."""
    id: str
    created_at: str


@dataclass(frozen=True)
class DeviceRecord:
    """
    Design (DeviceRecord)
    - Purpose: One validated, immutable device condition entry destined for the log.
    - Fields: all strings; numeric fields keep the operator-entered text.
    - Field order matches config.COLUMNS.
    """
    id: str
    created_at: str
    operator_id: str
    instance_id: str = ""
    app_version: str = ""
    device_id: str = ""
    device_name: str = ""
    status: str = ""
    action_type: str = ""
    voltage: str = ""
    temperature: str = ""
    severity: str = ""
    ui_latency_ms: str = ""
    notes: str = ""

    def as_dict(self) -> Dict[str, str]:
        """Attributes in column order."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


class SubmissionState(Enum):
    IDLE = "idle"
    GENERATING_IDENTITY = "generating_identity"
    WRITING = "writing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionResult:
    """
    Design (SubmissionResult)
    - Purpose: The single completion message of a submission.
    - Fields:
        ok: True when the record was fully written.
        record: The persisted record (None if identity generation failed).
        path: Target log file.
        error: The exception that stopped the submission (None on success).
    """
    ok: bool
    record: Optional[DeviceRecord]
    path: Path
    error: Optional[BaseException] = None
