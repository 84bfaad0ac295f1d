"""Logging setup with per-run context.

Modules log through `logging.getLogger(__name__)`; `configure_logging` picks
a human-readable or JSON formatter for the root logger. The run context
(`run_id`, and anything else set with `set_run_context`) lives in a
ContextVar, so it follows a flow run across awaits and into the tasks it
spawns.
"""

from __future__ import annotations

import json
import logging
import os
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

run_context: ContextVar[Optional[Dict[str, Any]]] = ContextVar("socketflow_run_context", default=None)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the run context merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(run_context.get() or {})

        node_id = getattr(record, "node_id", None)
        if node_id is not None:
            entry["node_id"] = node_id

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        context = run_context.get() or {}
        run_id = context.get("run_id", "")
        prefix = f"[run:{str(run_id)[:8]}] " if run_id else ""

        level = f"{record.levelname:<8}"
        if self.use_color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        line = f"[{level}] {prefix}{record.name}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str = "INFO", format: str = "auto") -> None:
    """Install a formatter on the root logger.

    Args:
        level: Log level name.
        format: "json", "human", or "auto" (JSON when LOG_FORMAT=json or
            ENV=production).
    """
    if format == "auto":
        if os.getenv("LOG_FORMAT", "").lower() == "json" or os.getenv("ENV", "").lower() == "production":
            format = "json"
        else:
            format = "human"

    handler = logging.StreamHandler()
    if format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(HumanFormatter(use_color=not os.getenv("NO_COLOR")))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


def set_run_context(**kwargs: Any) -> None:
    current = run_context.get() or {}
    run_context.set({**current, **kwargs})


def get_run_context() -> Dict[str, Any]:
    return dict(run_context.get() or {})


def clear_run_context() -> None:
    run_context.set(None)
