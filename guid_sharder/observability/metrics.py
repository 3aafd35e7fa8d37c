"""Prometheus-style run metrics. Thread-safe, in-memory, exported as a plain dict."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory registry of counters and latency histograms for shard runs.
    Counters may carry a strategy or failure-category label.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        strategy: str | None = None,
        category: str | None = None,
    ) -> None:
        """Increment a counter, labelled by strategy or category when given."""
        with self._lock:
            if strategy is not None:
                label = f"{name}:strategy={strategy}"
            elif category is not None:
                label = f"{name}:category={category}"
            else:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            by_label = self._counters_by_labels.setdefault(name, {})
            by_label[label] = by_label.get(label, 0) + value

    def observe_latency(self, name: str, latency_ms: float) -> None:
        """Record one latency observation in milliseconds."""
        with self._lock:
            self._histograms.setdefault(name, []).append(latency_ms)

    def export_metrics(self) -> dict[str, Any]:
        """Snapshot of every counter and histogram."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {k: dict(v) for k, v in self._counters_by_labels.items()},
                "histograms": {
                    k: {"count": len(v), "sum": sum(v), "values": list(v)}
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
