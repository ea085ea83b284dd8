"""Logging setup for the ``app`` logger hierarchy."""

import logging
import sys
import threading

_LOGGER_PREFIX = "app"
_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s%(context)s"

_configured = False
_lock = threading.Lock()


class ContextFormatter(logging.Formatter):
    """Appends structured ``extra=`` fields as ``key=value`` pairs."""

    _reserved = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
        "message",
        "asctime",
        "context",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            key: value for key, value in vars(record).items() if key not in self._reserved
        }
        record.context = (
            " " + " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
            if fields
            else ""
        )
        return super().format(record)


def configure_logging(level: str | int = logging.INFO) -> None:
    """Configure the ``app`` logger once; later calls only adjust the level."""
    global _configured
    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    with _lock:
        if _configured:
            return
        _configured = True

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ContextFormatter(_FORMAT))
    root.addHandler(handler)
    root.propagate = False


def reset_logging() -> None:
    global _configured
    with _lock:
        root = logging.getLogger(_LOGGER_PREFIX)
        for handler in list(root.handlers):
            root.removeHandler(handler)
        root.propagate = True
        _configured = False
