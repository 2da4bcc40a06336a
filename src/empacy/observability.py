"""In-process operation metrics and the health report built from them."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

_STARTED_AT = time.time()


@dataclass
class OperationStats:
    """Running latency aggregate for one Coordinator operation."""

    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, duration_ms: float, ok: bool) -> None:
        self.calls += 1
        if not ok:
            self.failures += 1
        self.total_ms += duration_ms
        self.last_ms = duration_ms
        if self.calls == 1:
            self.min_ms = self.max_ms = duration_ms
        else:
            self.min_ms = min(self.min_ms, duration_ms)
            self.max_ms = max(self.max_ms, duration_ms)

    def as_dict(self) -> dict[str, float | int]:
        avg = self.total_ms / self.calls if self.calls else 0.0
        return {
            "calls": self.calls,
            "failures": self.failures,
            "avgMs": round(avg, 3),
            "minMs": round(self.min_ms, 3),
            "maxMs": round(self.max_ms, 3),
            "lastMs": round(self.last_ms, 3),
        }


class OperationMetrics:
    def __init__(self) -> None:
        self._lock = Lock()
        self._stats: dict[str, OperationStats] = {}

    def record(self, operation: str, duration_ms: float, *, ok: bool = True) -> None:
        duration = max(float(duration_ms), 0.0)
        with self._lock:
            self._stats.setdefault(operation, OperationStats()).add(duration, ok)
        logger.debug(
            "operation=%s duration_ms=%.3f ok=%s", operation, duration, ok
        )

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                name: stats.as_dict() for name, stats in sorted(self._stats.items())
            }

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


_METRICS = OperationMetrics()


def record_operation(operation: str, duration_ms: float, *, ok: bool = True) -> None:
    """Record one timed call of *operation*."""
    _METRICS.record(operation, duration_ms, ok=ok)


@contextmanager
def track_operation(operation: str) -> Iterator[dict[str, bool]]:
    """Time the enclosed block; set ``outcome["ok"] = False`` to count a failure.

    An exception escaping the block is always counted as a failure.
    """
    outcome = {"ok": True}
    start = time.perf_counter()
    try:
        yield outcome
    except BaseException:
        outcome["ok"] = False
        raise
    finally:
        record_operation(
            operation,
            (time.perf_counter() - start) * 1000,
            ok=outcome["ok"],
        )


def operation_metrics_snapshot() -> dict[str, dict[str, float | int]]:
    return _METRICS.snapshot()


def reset_operation_metrics() -> None:
    """Clear all aggregates (test helper)."""
    _METRICS.reset()


def health_report(components: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Combine per-component status with uptime and operation metrics.

    A component reports ``{"healthy": bool, ...}``; the overall report is
    healthy only when every component is.
    """
    healthy = all(bool(info.get("healthy", False)) for info in components.values())
    return {
        "healthy": healthy,
        "uptimeSeconds": round(time.time() - _STARTED_AT, 3),
        "components": {name: dict(info) for name, info in components.items()},
        "operations": operation_metrics_snapshot(),
    }
