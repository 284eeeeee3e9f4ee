"""
Design (validators.py)
- Purpose: Field constraints, per-field chains, and whole-form validation.
- Inputs: Raw field strings keyed by record attribute name.
- Outputs: ValidationResult per constraint; {field -> message} for the whole form.
- Side effects: None.
- Thread-safety: Stateless; safe to call from any thread.

Policy: every field's chain is evaluated (collect-all), but each chain stops at its
first failing constraint (short-circuit per field), so at most one message per field.
"""

import math
import re
from typing import Dict, Iterable, Mapping, Sequence

from .config import (
    ACTION_TYPE_OPTIONS,
    APP_VERSION_MAX,
    DEVICE_NAME_MAX,
    INSTANCE_ID_MAX,
    INSTANCE_ID_MIN,
    NOTES_MAX,
    OPERATOR_ID_MAX,
    OPERATOR_ID_MIN,
    OPERATOR_ID_PATTERN,
    SEVERITY_OPTIONS,
    STATUS_OPTIONS,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    UI_LATENCY_MAX_MS,
    UI_LATENCY_MIN_MS,
    VOLTAGE_MAX,
    VOLTAGE_MIN,
)
from .models import DeviceRecord, Identity, ValidationResult


# Plain ASCII decimal text only: no spaces, underscores or non-ASCII digits
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_INTEGER = re.compile(r"[+-]?\d+", re.ASCII)


def _fmt_bound(bound: float) -> str:
    # 10000.0 -> "10000", -50.0 -> "-50", 0.5 -> "0.5"
    return f"{bound:g}"


class Required:
    def check(self, value: str, field_name: str) -> ValidationResult:
        if not value:
            return ValidationResult.invalid(f"{field_name} is required")
        return ValidationResult.valid()


class LengthRange:
    def __init__(self, min_len: int, max_len: int):
        self.min_len = min_len
        self.max_len = max_len

    def check(self, value: str, field_name: str) -> ValidationResult:
        if value and not (self.min_len <= len(value) <= self.max_len):
            return ValidationResult.invalid(
                f"{field_name} must be between {self.min_len} and {self.max_len} characters"
            )
        return ValidationResult.valid()


class Pattern:
    def __init__(self, pattern: str):
        self.regex = re.compile(pattern)

    def check(self, value: str, field_name: str) -> ValidationResult:
        if value and self.regex.fullmatch(value) is None:
            return ValidationResult.invalid(f"{field_name} contains invalid characters")
        return ValidationResult.valid()


class FloatRange:
    def __init__(self, min_value: float, max_value: float):
        self.min_value = min_value
        self.max_value = max_value

    def check(self, value: str, field_name: str) -> ValidationResult:
        if not value:
            return ValidationResult.valid()
        if _DECIMAL.fullmatch(value) is None:
            return ValidationResult.invalid(f"{field_name} must be a valid number")
        number = float(value)
        if not math.isfinite(number):
            return ValidationResult.invalid(f"{field_name} must be a valid number")
        if number < self.min_value or number > self.max_value:
            return ValidationResult.invalid(
                f"{field_name} must be between {_fmt_bound(self.min_value)} and {_fmt_bound(self.max_value)}"
            )
        return ValidationResult.valid()


class IntRange:
    def __init__(self, min_value: int, max_value: int):
        self.min_value = min_value
        self.max_value = max_value

    def check(self, value: str, field_name: str) -> ValidationResult:
        if not value:
            return ValidationResult.valid()
        if _INTEGER.fullmatch(value) is None:
            return ValidationResult.invalid(f"{field_name} must be a valid integer")
        try:
            number = int(value)
        except ValueError:  # exceeds the int digit limit
            return ValidationResult.invalid(f"{field_name} must be a valid integer")
        if number < self.min_value or number > self.max_value:
            return ValidationResult.invalid(
                f"{field_name} must be between {self.min_value} and {self.max_value}"
            )
        return ValidationResult.valid()


class OneOf:
    def __init__(self, allowed: Iterable[str]):
        self.allowed = frozenset(allowed)

    def check(self, value: str, field_name: str) -> ValidationResult:
        if value and value not in self.allowed:
            return ValidationResult.invalid(f"{field_name} has an invalid value")
        return ValidationResult.valid()


class FieldChain:
    """
    Design (FieldChain)
    - Purpose: Ordered constraints for one field; returns the first failure only.
    - Fields:
        label: Operator-facing field name embedded in messages (e.g. "Operator ID").
        constraints: Evaluated in order.
    """

    def __init__(self, label: str, constraints: Sequence):
        self.label = label
        self.constraints = list(constraints)

    def check(self, value: str) -> ValidationResult:
        for constraint in self.constraints:
            result = constraint.check(value, self.label)
            if not result.is_valid:
                return result
        return ValidationResult.valid()


# Per-field chains of the capture form, keyed by record attribute.
FORM_CHAINS: Dict[str, FieldChain] = {
    "operator_id": FieldChain("Operator ID", [
        Required(),
        LengthRange(OPERATOR_ID_MIN, OPERATOR_ID_MAX),
        Pattern(OPERATOR_ID_PATTERN),
    ]),
    "instance_id": FieldChain("Instance ID", [LengthRange(INSTANCE_ID_MIN, INSTANCE_ID_MAX)]),
    "app_version": FieldChain("App Version", [LengthRange(0, APP_VERSION_MAX)]),
    "device_id": FieldChain("Device ID", [Required()]),
    "device_name": FieldChain("Device Name", [LengthRange(0, DEVICE_NAME_MAX)]),
    "status": FieldChain("Status", [Required(), OneOf(STATUS_OPTIONS)]),
    "action_type": FieldChain("Action Type", [Required(), OneOf(ACTION_TYPE_OPTIONS)]),
    "voltage": FieldChain("Voltage", [FloatRange(VOLTAGE_MIN, VOLTAGE_MAX)]),
    "temperature": FieldChain("Temperature", [FloatRange(TEMPERATURE_MIN, TEMPERATURE_MAX)]),
    "severity": FieldChain("Severity", [OneOf(SEVERITY_OPTIONS)]),
    "ui_latency_ms": FieldChain("UI Latency", [IntRange(UI_LATENCY_MIN_MS, UI_LATENCY_MAX_MS)]),
    "notes": FieldChain("Notes", [LengthRange(0, NOTES_MAX)]),
}

# Choice fields are preselected in the form; a blank value means "first option".
CHOICE_DEFAULTS: Dict[str, str] = {
    "status": STATUS_OPTIONS[0],
    "action_type": ACTION_TYPE_OPTIONS[0],
    "severity": SEVERITY_OPTIONS[0],
}


def apply_defaults(values: Mapping[str, str]) -> Dict[str, str]:
    """
    Purpose: Normalize raw form values: every chained field present, blank choices defaulted.
    Inputs: values {field -> raw string}; missing keys count as ''.
    Outputs: New dict covering every key of FORM_CHAINS.
    """
    normalized = {name: (values.get(name) or "") for name in FORM_CHAINS}
    for name, default in CHOICE_DEFAULTS.items():
        if not normalized[name]:
            normalized[name] = default
    return normalized


def validate_form(values: Mapping[str, str]) -> Dict[str, str]:
    """
    Purpose: Run every field chain independently and collect the failures.
    Inputs: values {field -> raw string}.
    Outputs: {field -> message} for failing fields only; empty dict means accepted.
    """
    normalized = apply_defaults(values)
    errors: Dict[str, str] = {}
    for name, chain in FORM_CHAINS.items():
        result = chain.check(normalized[name])
        if not result.is_valid:
            errors[name] = result.message
    return errors


def build_record(values: Mapping[str, str], identity: Identity) -> DeviceRecord:
    """
    Purpose: Construct the immutable record once validation passed and identity exists.
    Inputs: values (already validated), identity (id, created_at).
    Outputs: DeviceRecord. Does not re-validate.
    """
    normalized = apply_defaults(values)
    return DeviceRecord(id=identity.id, created_at=identity.created_at, **normalized)
