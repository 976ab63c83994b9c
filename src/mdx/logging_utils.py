"""Logging utilities for mdx."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

_LEVELS_BY_NAME = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "ERROR": logging.ERROR,
}


class StructuredTextFormatter(logging.Formatter):
    """Render structured events as one `LEVEL event: key=value ...` line.

    Messages that are not JSON objects (plain `logger.debug(...)` traces) are
    rendered as `LEVEL logger: message`.
    """

    @staticmethod
    def _format_value(value: Any) -> str:
        value_str = value if isinstance(value, str) else json.dumps(value)
        return value_str.replace("\n", "\\n")

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        parsed = None
        if message.startswith("{") and message.endswith("}"):
            try:
                parsed = json.loads(message)
            except ValueError:
                parsed = None

        if not isinstance(parsed, dict) or "event" not in parsed:
            return f"{record.levelname} {record.name}: {message}"

        event = parsed.pop("event")
        fields = " ".join(
            f"{key}={self._format_value(value)}"
            for key, value in parsed.items()
            if value is not None
        )
        line = f"{record.levelname} {event}:"
        return f"{line} {fields}" if fields else line


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured log event on the `mdx` logger."""
    payload: dict[str, Any] = {"event": event}
    payload.update(fields)
    logging.getLogger("mdx").log(
        level, json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    )


def resolve_log_level(level_name: str | None) -> int:
    """Map an `MDX_LOG_LEVEL` value to a logging level (WARNING by default)."""
    if not level_name:
        return logging.WARNING
    return _LEVELS_BY_NAME.get(level_name.strip().upper(), logging.WARNING)


def setup_logging(level_name: str | None, stream: TextIO | None = None) -> None:
    """Set up logging on stderr at the level named by `level_name`."""
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(StructuredTextFormatter())
    logging.basicConfig(level=resolve_log_level(level_name), handlers=[handler], force=True)
