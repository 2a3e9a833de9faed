from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from ledger.sensitivity import contains_sensitive_data

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Request/response bodies that carry ledger rows or rendered summaries.
REDACTED_FIELDS = frozenset({"ledger_text", "insights", "prompt", "text"})
REDACTED = "[redacted]"


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


def scrub(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            k: REDACTED if k in REDACTED_FIELDS else scrub(v)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [scrub(v) for v in data]
    if isinstance(data, str) and contains_sensitive_data(data):
        return REDACTED
    return data


class LedgerRedactionFilter(logging.Filter):
    """Keeps ledger content and price-like strings out of structured log data."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get("")
        if hasattr(record, "extra_data"):
            record.extra_data = scrub(record.extra_data)
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id.get(""),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            entry["data"] = record.extra_data
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(LedgerRedactionFilter())
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(name)s] %(message)s [cid=%(correlation_id)s]"
        ))
    root.addHandler(handler)
