"""
Design (codec.py)
- Purpose: Render a DeviceRecord as a CSV row or a flat JSON object, parse CSV rows
           back into columns, and generate record identities.
- Inputs: DeviceRecord / raw strings.
- Outputs: Rendered text; list of column strings; Identity.
- Side effects: generate_identity() reads the clock and the OS random source.
- Thread-safety: Stateless; safe to call from any thread.
"""

import uuid
from datetime import datetime
from typing import List

from .config import TIMESTAMP_FORMAT
from .models import DeviceRecord, Identity

_CSV_SPECIALS = (",", '"', "\n", "\r")

_JSON_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def csv_escape(value: str) -> str:
    """
    Purpose: Quote a value only when it holds a comma, a double quote or a line break.
    Outputs: The value verbatim, or wrapped in quotes with inner quotes doubled.
    """
    if not any(ch in value for ch in _CSV_SPECIALS):
        return value
    return '"' + value.replace('"', '""') + '"'


def parse_csv_line(line: str) -> List[str]:
    """
    Purpose: Split one CSV record into columns (quote toggles, "" is a literal quote).
    Inputs: line without its terminator; may contain line breaks inside quotes.
    Outputs: Column strings; an empty line yields [''].
    """
    cols: List[str] = []
    cur: List[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    cur.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                cur.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            cols.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    cols.append("".join(cur))
    return cols


def render_csv_row(record: DeviceRecord) -> str:
    """Columns in fixed order, each escaped; no line terminator."""
    return ",".join(csv_escape(v) for v in record.as_dict().values())


def json_escape(value: str) -> str:
    """
    Purpose: Escape a string for a JSON string literal (quotes not included).
    Notes: Control characters without a short escape become \\u00XX; non-ASCII passes through.
    """
    out = []
    for ch in value:
        if ch in _JSON_ESCAPES:
            out.append(_JSON_ESCAPES[ch])
        elif ord(ch) < 0x20:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    return "".join(out)


def render_json_object(record: DeviceRecord) -> str:
    """Flat object, every value a JSON string (numeric fields keep their entered text)."""
    members = (f'"{json_escape(k)}":"{json_escape(v)}"' for k, v in record.as_dict().items())
    return "{" + ",".join(members) + "}"


def generate_identity() -> Identity:
    """
    Purpose: New record identity: random UUID (version 4) and local wall-clock time.
    Outputs: Identity(id='xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx', created_at='YYYY-MM-DD HH:MM:SS').
    """
    return Identity(id=str(uuid.uuid4()), created_at=datetime.now().strftime(TIMESTAMP_FORMAT))
