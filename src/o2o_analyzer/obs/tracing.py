"""Invocation tracing and latency accounting."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone

from o2o_analyzer.types import ToolTrace


@dataclass(slots=True)
class TraceRecord:
    trace_id: int
    timestamp_utc: str
    tool: ToolTrace


class TraceStore:
    """In-memory ring of recent tool invocations for API-level observability."""

    def __init__(self, *, capacity: int = 500) -> None:
        self._records: deque[TraceRecord] = deque(maxlen=capacity)
        self._next_id = 1
        self._lock = threading.Lock()

    def record(self, trace: ToolTrace) -> TraceRecord:
        with self._lock:
            record = TraceRecord(
                trace_id=self._next_id,
                timestamp_utc=datetime.now(timezone.utc).isoformat(),
                tool=trace,
            )
            self._next_id += 1
            self._records.append(record)
        return record

    def get(self, trace_id: int) -> TraceRecord:
        with self._lock:
            records = list(self._records)
        for record in records:
            if record.trace_id == trace_id:
                return record
        raise KeyError(f"Trace not found: {trace_id}")

    def list_recent(self, limit: int = 20) -> list[TraceRecord]:
        if limit <= 0:
            return []
        with self._lock:
            return list(self._records)[-limit:]

    def summary(self) -> dict[str, object]:
        """Aggregate invocation metrics for dashboard display."""
        with self._lock:
            records = list(self._records)
        total = len(records)
        if total == 0:
            return {
                "total_invocations": 0,
                "error_count": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "by_tool": {},
            }

        latencies = sorted(record.tool.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        by_tool: dict[str, int] = {}
        for record in records:
            by_tool[record.tool.name] = by_tool.get(record.tool.name, 0) + 1

        return {
            "total_invocations": total,
            "error_count": sum(1 for record in records if record.tool.is_error),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "by_tool": by_tool,
        }


class Timer:
    """Simple context timer."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
