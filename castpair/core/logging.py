"""Logging setup shared by the CLI and the web front end."""

from __future__ import annotations

import logging
import os

__all__ = ["configure_logging"]

_VERBOSE_ENV = "CASTPAIR_LOG_VERBOSE"


class _KeyValueFormatter(logging.Formatter):
    """Render records as ``time=... level=... logger=... msg=...``."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03d"

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        parts = [
            f"time={self.formatTime(record, self.datefmt)}",
            f"level={record.levelname}",
            f"logger={record.name}",
        ]
        if record.message:
            parts.append(f"msg={record.message}")
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _resolve_level(verbose: bool) -> int:
    if verbose or os.getenv(_VERBOSE_ENV) in {"1", "true", "TRUE", "yes", "on"}:
        return logging.DEBUG
    return logging.INFO


def configure_logging(*, verbose: bool = False) -> None:
    """Install a key=value handler on the root logger unless one is present."""
    level = _resolve_level(verbose)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(_KeyValueFormatter())
        root.addHandler(handler)
    root.setLevel(level)
    # urllib3 logs every connection at DEBUG.
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    logging.captureWarnings(True)
