# src/taskpad/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that report every load/save; on the console only their problems matter.
_CHATTY_PREFIXES = ("taskpad.storage.", "taskpad.tasks.task_store", "taskpad.prefs.")


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console output shares the terminal with the task prompt.

    taskpad records pass, except per-call storage and store chatter below WARNING.
    Everything else (third-party, asyncio, captured warnings) only at ERROR.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith(_CHATTY_PREFIXES):
            return record.levelno >= logging.WARNING
        if name.startswith("taskpad.") or name == "taskpad":
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskpad",
    app_name: str = "taskpad",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Console handler on stderr (filtered) plus a full log at <log_dir>/<app_name>.log.

    Replaces any handlers already on the root logger, so calling it twice does
    not duplicate output. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
