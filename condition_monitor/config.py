"""
Design (config.py)
- Purpose: Centralize constants and configuration.
- Inputs: None.
- Outputs: Constants (field limits, choice lists, column order, file names).
- Side effects: None.
- Thread-safety: N/A (read-only constants).
"""

APP_TITLE = "Device Condition Monitor"

# Field limits (characters unless noted)
OPERATOR_ID_MIN = 1
OPERATOR_ID_MAX = 64
OPERATOR_ID_PATTERN = r"^[a-zA-Z0-9_.-]+$"
INSTANCE_ID_MIN = 1
INSTANCE_ID_MAX = 64
APP_VERSION_MAX = 32
DEVICE_NAME_MAX = 128
NOTES_MAX = 500

VOLTAGE_MIN = 0.0
VOLTAGE_MAX = 10000.0
TEMPERATURE_MIN = -50.0
TEMPERATURE_MAX = 250.0
UI_LATENCY_MIN_MS = 0
UI_LATENCY_MAX_MS = 600000

# Choice lists; the first entry is the form default
STATUS_OPTIONS = ["Unknown", "Online", "Offline", "Degraded"]
ACTION_TYPE_OPTIONS = ["Check", "Maintenance", "Repair", "Replace"]
SEVERITY_OPTIONS = ["Low", "Medium", "High", "Critical"]

DEFAULT_APP_VERSION = "1.0.0"
DEFAULT_UI_LATENCY_MS = "0"

# Fixed column order shared by the CSV header and the JSON object keys
COLUMNS = (
    "id",
    "created_at",
    "operator_id",
    "instance_id",
    "app_version",
    "device_id",
    "device_name",
    "status",
    "action_type",
    "voltage",
    "temperature",
    "severity",
    "ui_latency_ms",
    "notes",
)
CSV_HEADER = ",".join(COLUMNS)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Persistence
LOG_FORMAT_CSV = "csv"
LOG_FORMAT_JSON = "json"
LOG_FORMATS = [LOG_FORMAT_CSV, LOG_FORMAT_JSON]
DEFAULT_LOG_FORMAT = LOG_FORMAT_CSV
CSV_FILENAME = "devices.csv"
JSON_FILENAME = "devices.json"
DATA_DIR_ENV = "CONDITION_MONITOR_DATA_DIR"
APPDATA_DIRNAME = "Device Condition Monitor"

# Debug log written next to the record logs
DEBUG_LOG_FILENAME = "debug.log"

ICON_FILE = "logo.ico"  # Expected at condition_monitor/icons/logo.ico (optional)
