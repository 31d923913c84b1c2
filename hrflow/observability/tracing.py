"""Structured event logging for the workflow service.

Events are emitted as one JSON object per line on stdout. Each line carries the
event name, the trace id shared by everything one operation emits, and a level
so a collector can route warnings apart from routine transitions.
"""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

LEVELS = ('debug', 'info', 'warning', 'error')


@dataclass
class Span:
    name: str
    trace_id: str
    span_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    start_ns: int = field(default_factory=time.time_ns)
    end_ns: int | None = None
    outcome: str = 'ok'
    attributes: dict[str, Any] = field(default_factory=dict)

    def fail(self, exc: BaseException) -> None:
        self.outcome = 'error'
        self.attributes['error_type'] = type(exc).__name__

    def end(self) -> None:
        self.end_ns = time.time_ns()

    @property
    def duration_ms(self) -> float | None:
        if self.end_ns is None:
            return None
        return (self.end_ns - self.start_ns) / 1_000_000.0

    def as_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'span_id': self.span_id,
            'outcome': self.outcome,
            'duration_ms': self.duration_ms,
            'attributes': self.attributes,
        }


def new_trace_id() -> str:
    return uuid.uuid4().hex


def log_event(
        event: str,
        *,
        trace_id: str,
        span: Span | None = None,
        level: str = 'info',
        **fields: Any,
) -> None:
    if level not in LEVELS:
        raise ValueError(f"Unknown log level '{level}'")

    payload: dict[str, Any] = {
        'ts': datetime.now(timezone.utc).isoformat(timespec='milliseconds'),
        'level': level,
        'event': event,
        'trace_id': trace_id,
        **fields,
    }
    if span is not None:
        payload['span'] = span.as_dict()
    # Enums, datetimes and ids go through str()
    print(json.dumps(payload, ensure_ascii=False, default=str), flush=True)
