from __future__ import annotations

import logging
import threading
import traceback
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Dict, List, Tuple

_BUFFER_MAX = 1000
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_buffer: Deque[Dict[str, object]] = deque(maxlen=_BUFFER_MAX)
_lock = threading.Lock()
_next_id = 1
_handler: _LogBufferHandler | None = None


class _LogBufferHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "uvicorn.access":
            return
        global _next_id
        try:
            message = record.getMessage()
            if record.exc_info:
                message = f"{message}\n{''.join(traceback.format_exception(*record.exc_info))}".rstrip()

            ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
            with _lock:
                _buffer.append({
                    "id": _next_id,
                    "ts": ts,
                    "level": record.levelname,
                    "logger": record.name,
                    "message": message,
                })
                _next_id += 1
        except Exception:
            self.handleError(record)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger and the package log level."""
    logging.basicConfig(level=logging.WARNING, format=_LOG_FORMAT)
    logging.getLogger("imageserver").setLevel(level.upper())


def install_log_buffer() -> None:
    """Attach the in-memory handler once; later calls are no-ops."""
    global _handler
    if _handler is not None:
        return
    handler = _LogBufferHandler()
    handler.setLevel(logging.INFO)
    _handler = handler
    logging.getLogger("imageserver").addHandler(handler)
    # uvicorn's loggers do not propagate to ours.
    logging.getLogger("uvicorn.error").addHandler(handler)


def get_log_entries(since_id: int | None, limit: int) -> Tuple[List[Dict[str, object]], int | None]:
    with _lock:
        items = list(_buffer)
        newest = int(_buffer[-1]["id"]) if _buffer else None
    if since_id is not None:
        items = [entry for entry in items if int(entry["id"]) > since_id]
    if limit and len(items) > limit:
        items = items[-limit:]
    last_id = int(items[-1]["id"]) if items else newest
    return items, last_id


def clear_log_entries() -> None:
    global _next_id
    with _lock:
        _buffer.clear()
        _next_id = 1
