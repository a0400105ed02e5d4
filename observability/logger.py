"""Structured event logging for practice sessions.

Every event goes to stdout as one human-readable line. With ``ENABLE_FILE_LOGS``
set, the same event is also written as JSON to ``LOG_FILE`` and as a human line
to a ``-human.log`` sibling, both rotated by size.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Dict, List

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FIELDS = ("interview_level", "question_id", "classification", "total_score", "status", "grade", "error", "ms")

_HUMAN_FORMATTER = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

_events = logging.getLogger("visa_interview.events")
_events.setLevel(LOG_LEVEL)
_events.propagate = False


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _handler(handler: logging.Handler, formatter: logging.Formatter, *, json_lines: bool) -> logging.Handler:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(lambda record: _is_json(record) == json_lines)
    return handler


def _human_log_path(path: str) -> str:
    root, _ = os.path.splitext(path)
    return f"{root}-human.log"


def _install_handlers() -> None:
    if _events.handlers:
        return
    _events.addHandler(_handler(logging.StreamHandler(stream=sys.stdout), _HUMAN_FORMATTER, json_lines=False))
    if not ENABLE_FILE_LOGS:
        return

    directory = os.path.dirname(LOG_FILE)
    if directory:
        os.makedirs(directory, exist_ok=True)
    for path, formatter, json_lines in (
        (LOG_FILE, logging.Formatter("%(message)s"), True),
        (_human_log_path(LOG_FILE), _HUMAN_FORMATTER, False),
    ):
        rotating = logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)
        _events.addHandler(_handler(rotating, formatter, json_lines=json_lines))


def format_event(event: Dict[str, Any]) -> str:
    """One-line rendering of the fields operators scan for."""

    parts: List[str] = [f"session={event.get('session_id')}", f"kind={event.get('kind')}"]
    parts.extend(f"{key}={event[key]}" for key in HUMAN_FIELDS if event.get(key) not in (None, ""))
    return " ".join(parts)


def _write(message: str, level: int, *, is_json: bool) -> None:
    _events.log(level, message, extra={"is_json": is_json})


def log_event(kind: str, session_id: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Record a session event such as ``session_created`` or ``answer_graded``."""

    _install_handlers()
    event: Dict[str, Any] = {
        "ts": time.time(),
        "trace": uuid.uuid4().hex,
        "kind": kind,
        "session_id": session_id,
        **fields,
    }
    _write(format_event(event), level, is_json=False)
    if ENABLE_FILE_LOGS:
        _write(json.dumps(event, ensure_ascii=False, default=str), level, is_json=True)


__all__ = ["format_event", "log_event"]
