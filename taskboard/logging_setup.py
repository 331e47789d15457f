# taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys


class _ContextFormatter(logging.Formatter):
    """Append the `extra={...}` fields handlers attach to event-style messages."""

    _RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {k: v for k, v in vars(record).items() if k not in self._RESERVED}
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in sorted(context.items()))
            line = f"{line} [{pairs}]"
        return line


def setup_logging(level: str | int = "INFO") -> None:
    """
    Configure the root logger with a single stderr handler.

    Call this ONCE, when the app is created.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        _ContextFormatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
