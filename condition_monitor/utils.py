"""
Design (utils.py)
- Purpose: Reusable helpers: icon path detection (PyInstaller), desktop notifications,
           and a Tk-thread dispatcher for background completions.
- Inputs: Various helper parameters (filename, title/message, Tk widget).
- Outputs: Helper results (paths, callables).
- Side effects: notify() shows an OS notification via plyer.
- Thread-safety: Stateless; notify and the dispatcher are safe to call from any thread.
"""

import logging
import os
import sys
from typing import Callable

from plyer import notification

logger = logging.getLogger(__name__)


def get_icon_path(filename: str) -> str:
    """
    Purpose: Resolve icon path for both dev (script) and PyInstaller (frozen) runs.
    Inputs: filename (e.g., "logo.ico")
    Outputs: Path usable with Tk.iconbitmap (may not exist).
    """
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return os.path.join(sys._MEIPASS, filename)  # type: ignore[attr-defined]
    # In development, icon is expected at condition_monitor/icons/<filename>
    here = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(here, "icons", filename)


def notify(title: str, message: str, timeout: int = 5) -> bool:
    """
    Purpose: Show a desktop notification.
    Outputs: True if the platform backend accepted it, False otherwise (failure is logged).
    """
    try:
        notification.notify(title=title, message=message, timeout=timeout)
    except Exception as exc:  # plyer backends raise NotImplementedError and platform errors
        logger.debug("Desktop notification unavailable: %s", exc)
        return False
    return True


def tk_dispatcher(widget) -> Callable[[Callable[[], None]], None]:
    """
    Purpose: Build a dispatch function that runs callbacks on the Tk main thread.
    Inputs: any Tk widget (usually the root).
    Outputs: dispatch(fn) -> None; schedules fn via widget.after(0, ...).
    """
    def dispatch(fn: Callable[[], None]) -> None:
        widget.after(0, fn)

    return dispatch
