import logging
import tkinter as tk
from tkinter import messagebox

from condition_monitor.app_logger import configure_logging
from condition_monitor.config import DEBUG_LOG_FILENAME
from condition_monitor.storage import get_data_dir
from condition_monitor.ui import AppUI


def main():
    configure_logging(get_data_dir() / DEBUG_LOG_FILENAME)
    log = logging.getLogger("condition_monitor.main")
    log.info("Application starting")

    root = tk.Tk()
    try:
        AppUI(root)
    except Exception as exc:
        log.exception("Error initializing application")
        messagebox.showerror("Error", f"Error initializing application: {exc}")
        root.destroy()
        return
    log.info("Frame shown")
    root.mainloop()
    log.info("Application closed")


if __name__ == "__main__":
    main()
