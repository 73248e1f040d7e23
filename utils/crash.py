"""Crash records: uncaught exceptions become JSON lines in the crash log."""

import json
import os
import sys
import traceback

from utils.ksuid import generate_ksuid
from utils.timestamp import format_timestamp

_crash_log = "logs/crash.log"
_context = {}


def configure(crash_file):
    """Set crash log file path from config."""
    global _crash_log
    _crash_log = crash_file


def set_context(**fields):
    """Attach run details (mode, arguments) to every later crash record."""
    _context.update(fields)


def _write_crash(crash_id, timestamp, exc_name, exc_msg, tb, context=None):
    """Write crash to file. Never raises."""
    record = {"id": crash_id, "timestamp": timestamp, "type": exc_name, "msg": exc_msg, "traceback": tb}
    merged = {**_context, **(context or {})}
    if merged:
        record["context"] = merged
    try:
        log_dir = os.path.dirname(_crash_log)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(_crash_log, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")
    except OSError:
        pass
    return record


def log_crash(exc_type, exc_value, exc_tb):
    """Log sync crash to stderr and file."""
    crash_id = generate_ksuid()
    timestamp = format_timestamp()
    exc_name = exc_type.__name__ if exc_type else "Unknown"
    exc_msg = str(exc_value) if exc_value else ""
    tb = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

    sys.stderr.write(f"\n{'=' * 60}\nCRASH [{crash_id}] {timestamp}\n{'=' * 60}\n")
    sys.stderr.write(f"{exc_name}: {exc_msg}\n{'-' * 60}\n{tb}{'=' * 60}\n\n")
    _write_crash(crash_id, timestamp, exc_name, exc_msg, tb)


def create_async_handler(logger=None):
    """Exception handler for the event loop: logs and records task crashes."""
    def handler(loop, context):
        exc = context.get("exception")
        exc_name = type(exc).__name__ if exc else "AsyncError"
        exc_msg = str(exc) if exc else context.get("message", "Unknown")
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc else None
        if logger:
            logger.error("Async exception", error=exc_msg, task=str(context.get("future", "unknown")))
        _write_crash(generate_ksuid(), format_timestamp(), exc_name, exc_msg, tb,
                     {"future": str(context.get("future", ""))})
    return handler


def install_crash_handler():
    """Install global sync exception handler."""
    sys.excepthook = log_crash
