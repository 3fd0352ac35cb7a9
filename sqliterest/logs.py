"""Operation log for the HTTP layer.

Records are kept in a bounded in-memory buffer and emitted on the
``sqliterest.ops`` logger. Nothing is written into the served database.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
import threading
import time
import uuid
from collections import deque
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger("sqliterest.ops")

DEFAULT_BUFFER_SIZE = 500

_lock = threading.Lock()
_records: deque = deque(maxlen=DEFAULT_BUFFER_SIZE)
_handler: Optional[Callable[[str], None]] = None


def configure_log_buffer(size: int):
    """Resize the buffer, keeping the newest records."""
    global _records
    with _lock:
        _records = deque(_records, maxlen=max(1, size))


def set_log_handler(handler: Optional[Callable[[str], None]]):
    """Host callback receiving every rendered log line (None to remove)."""
    global _handler
    _handler = handler


def clear_logs():
    with _lock:
        _records.clear()


def _dump(obj) -> Optional[str]:
    return json.dumps(obj, ensure_ascii=False, default=str) if obj is not None else None


class LogContext:
    def __init__(self, action: str, user: str = "local"):
        self.action = action
        self.user = user
        self.request_id = str(uuid.uuid4())
        self.start = time.perf_counter()
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid):
        self.entity_type = etype
        self.entity_id = None if eid is None else str(eid)

    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None) -> Dict[str, Any]:
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "after_json": _dump(self.after),
            "payload_json": _dump(self.payload),
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        with _lock:
            _records.append(rec)

        line = f"{self.action} {result} {elapsed_ms}ms"
        if self.entity_type:
            line += f" {self.entity_type}={self.entity_id}"
        if err:
            line += f" err={err}"
        if result == "OK":
            logger.info(line)
        else:
            logger.error(line)
        if _handler is not None:
            try:
                _handler(line)
            except Exception:
                logger.exception("log handler failed")
        return rec


def search_operation_logs(
    q: str | None,
    action: str | None,
    ts_from: str | None,
    ts_to: str | None,
    page: int,
    size: int,
) -> Tuple[int, List[Dict[str, Any]]]:
    """Filter the buffer newest-first and return (total, page_items)."""
    with _lock:
        items = list(reversed(_records))
    if q:
        items = [
            r for r in items
            if any(q in (r.get(k) or "") for k in ("payload_json", "after_json", "err_msg"))
        ]
    if action:
        items = [r for r in items if r["action"] == action]
    if ts_from:
        items = [r for r in items if r["ts"] >= ts_from]
    if ts_to:
        items = [r for r in items if r["ts"] <= ts_to]
    page = max(1, page)
    size = max(1, size)
    start = (page - 1) * size
    return len(items), items[start:start + size]
