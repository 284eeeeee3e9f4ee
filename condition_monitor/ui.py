"""
Design (ui.py)
- Purpose: Build and manage the Tkinter capture form (entries, choices, inline errors,
           Add Device / Clear Fields).
- Inputs: Tk root; log format and path resolver.
- Outputs: None (renders UI, starts SubmissionTasks).
- Side effects: Creates windows; shows message boxes and desktop notifications.
- Thread-safety: UI code runs on main thread; submission completions are marshalled back
                 through Tk.after() (utils.tk_dispatcher).
"""

import logging
import tkinter as tk
from tkinter import ttk, messagebox
from pathlib import Path
from typing import Callable, Dict, Optional

from .config import (
    ACTION_TYPE_OPTIONS,
    APP_TITLE,
    DEFAULT_APP_VERSION,
    DEFAULT_LOG_FORMAT,
    DEFAULT_UI_LATENCY_MS,
    ICON_FILE,
    LOG_FORMATS,
    SEVERITY_OPTIONS,
    STATUS_OPTIONS,
)
from .models import SubmissionResult
from .storage import get_log_path
from .submission import SubmissionTask
from .utils import get_icon_path, notify, tk_dispatcher
from .validators import validate_form

logger = logging.getLogger(__name__)

BG = "#1e1e1e"
FIELD_BG = "#2b2b2b"
HEADER_BG = "#003366"
ERROR_FG = "#FF6A6A"

# (record attribute, label, widget kind, choices)
FORM_FIELDS = [
    ("operator_id", "Operator ID:", "entry", None),
    ("instance_id", "Instance ID:", "entry", None),
    ("app_version", "App Version:", "entry", None),
    ("device_id", "Device ID:", "entry", None),
    ("device_name", "Device Name:", "entry", None),
    ("status", "Device Status:", "choice", STATUS_OPTIONS),
    ("action_type", "Action Type:", "choice", ACTION_TYPE_OPTIONS),
    ("voltage", "Voltage (V):", "entry", None),
    ("temperature", "Temperature (°C):", "entry", None),
    ("severity", "Severity:", "choice", SEVERITY_OPTIONS),
    ("ui_latency_ms", "UI Latency (ms):", "entry", None),
    ("notes", "Notes:", "text", None),
]

FIELD_DEFAULTS = {
    "app_version": DEFAULT_APP_VERSION,
    "ui_latency_ms": DEFAULT_UI_LATENCY_MS,
}


class AppUI:
    """
    Design (AppUI)
    - Purpose: Encapsulate all UI creation and behavior.
    - Public attributes:
        enable_notifications (tk.BooleanVar): toggles desktop notifications on completion
        log_format (tk.StringVar): 'csv' or 'json'
    - Public methods:
        collect_values(): raw strings from every field
        add_device(): validate, then submit in the background
        clear_fields(): restore defaults and clear errors
    """

    def __init__(self, root: tk.Tk, path_for_format: Callable[[str], Path] = get_log_path):
        self.root = root
        self.path_for_format = path_for_format
        self._task: Optional[SubmissionTask] = None

        self.enable_notifications = tk.BooleanVar(value=True)
        self.log_format = tk.StringVar(value=DEFAULT_LOG_FORMAT)

        # Window
        self.root.title(APP_TITLE)
        try:
            self.root.iconbitmap(get_icon_path(ICON_FILE))
        except tk.TclError:
            logger.debug("Icon %s not found; using default", ICON_FILE)
        self.root.minsize(800, 600)
        self.root.configure(bg=BG)
        self.root.columnconfigure(0, weight=1)

        # Header
        header = tk.Frame(self.root, bg=HEADER_BG, height=40)
        header.grid(row=0, column=0, sticky="ew")
        tk.Label(header, text=APP_TITLE, fg="white", bg=HEADER_BG,
                 font=("Segoe UI", 13, "bold")).pack(pady=8)

        # Form grid: label | (widget over error label)
        form = tk.Frame(self.root, bg=BG)
        form.grid(row=1, column=0, padx=10, pady=(20, 10))
        form.columnconfigure(1, weight=1)

        self._vars: Dict[str, tk.StringVar] = {}
        self._errors: Dict[str, tk.StringVar] = {}
        self.notes_box: Optional[tk.Text] = None

        for row, (name, label, kind, choices) in enumerate(FORM_FIELDS):
            sticky = "ne" if kind == "text" else "e"
            tk.Label(form, text=label, fg="white", bg=BG).grid(row=row, column=0, sticky=sticky, padx=5, pady=2)
            cell = tk.Frame(form, bg=BG)
            cell.grid(row=row, column=1, sticky="ew", padx=5, pady=2)

            if kind == "text":
                self.notes_box = tk.Text(cell, height=4, width=40, bg=FIELD_BG, fg="white", insertbackground="white")
                self.notes_box.pack(fill=tk.X)
            elif kind == "choice":
                var = tk.StringVar(value=choices[0])
                ttk.Combobox(cell, textvariable=var, values=choices, state="readonly", width=38).pack(fill=tk.X)
                self._vars[name] = var
            else:
                var = tk.StringVar(value=FIELD_DEFAULTS.get(name, ""))
                tk.Entry(cell, textvariable=var, width=40).pack(fill=tk.X)
                self._vars[name] = var

            err = tk.StringVar(value="")
            tk.Label(cell, textvariable=err, fg=ERROR_FG, bg=BG, font=("Segoe UI", 8), anchor="w").pack(fill=tk.X)
            self._errors[name] = err

        # Buttons & toggles
        button_frame = tk.Frame(self.root, bg=BG)
        button_frame.grid(row=2, column=0, pady=(0, 10))

        self.add_btn = ttk.Button(button_frame, text="Add Device", command=self.add_device)
        self.add_btn.pack(side=tk.LEFT, padx=5)
        ttk.Button(button_frame, text="Clear Fields", command=self.clear_fields).pack(side=tk.LEFT, padx=5)

        tk.Label(button_frame, text="Log format", fg="white", bg=BG).pack(side=tk.LEFT, padx=(15, 2))
        ttk.Combobox(button_frame, textvariable=self.log_format, values=LOG_FORMATS,
                     state="readonly", width=6).pack(side=tk.LEFT, padx=5)

        tk.Checkbutton(
            button_frame,
            text="Enable Notifications",
            variable=self.enable_notifications,
            fg="white",
            bg=BG,
            selectcolor=FIELD_BG,
            activebackground=BG,
            activeforeground="white",
        ).pack(side=tk.LEFT, padx=5)

    # ---------- form state ----------

    def collect_values(self) -> Dict[str, str]:
        values = {name: var.get() for name, var in self._vars.items()}
        values["notes"] = self.notes_box.get("1.0", "end-1c") if self.notes_box else ""
        return values

    def show_errors(self, errors: Dict[str, str]) -> None:
        for name, var in self._errors.items():
            var.set(errors.get(name, ""))

    def clear_fields(self) -> None:
        """Restore defaults (choices back to their first option) and clear all errors."""
        for name, _label, kind, choices in FORM_FIELDS:
            if kind == "choice":
                self._vars[name].set(choices[0])
            elif kind == "entry":
                self._vars[name].set(FIELD_DEFAULTS.get(name, ""))
        if self.notes_box is not None:
            self.notes_box.delete("1.0", "end")
        self.show_errors({})

    # ---------- submission ----------

    def add_device(self) -> None:
        """
        Purpose: Validate every field, show inline errors, and on success submit in the background.
        Side effects: Disables Add Device until the submission completes.
        """
        if self._task is not None:
            return  # one submission in flight

        values = self.collect_values()
        errors = validate_form(values)
        self.show_errors(errors)
        if errors:
            logger.debug("Validation failed for %s", ", ".join(errors))
            return

        fmt = self.log_format.get()
        try:
            path = self.path_for_format(fmt)
        except (OSError, ValueError) as exc:
            logger.exception("Cannot resolve record log path")
            messagebox.showerror("Error", f"Failed to save device data\n\n{exc}")
            return

        self.add_btn.state(["disabled"])
        self._task = SubmissionTask(values, path, fmt, self._on_submitted, dispatch=tk_dispatcher(self.root))
        self._task.start()

    def _on_submitted(self, result: SubmissionResult) -> None:
        """Runs on the Tk thread once per submission."""
        self._task = None
        self.add_btn.state(["!disabled"])
        if result.ok:
            message = f"Device {result.record.device_id} added successfully!"
        else:
            message = "Failed to save device data"
        if self.enable_notifications.get():
            notify(APP_TITLE, message)
        if result.ok:
            messagebox.showinfo("Success", message)
        else:
            messagebox.showerror("Error", f"{message}\n\n{result.error}")
