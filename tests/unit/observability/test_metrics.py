"""MetricsCollector tests: counters, histogram, strategy and category labels."""

import threading

from guid_sharder.observability.metrics import MetricsCollector


def test_metrics_counter_increment():
    """Counter increments correctly."""
    m = MetricsCollector()
    m.increment("ids_distributed_total")
    m.increment("ids_distributed_total", 2)
    out = m.export_metrics()
    assert out["counters"]["ids_distributed_total"] == 3


def test_metrics_histogram_tracks_latency():
    m = MetricsCollector()
    m.observe_latency("inventory_fetch_latency_ms", 10.5)
    m.observe_latency("inventory_fetch_latency_ms", 20.0)
    h = m.export_metrics()["histograms"]["inventory_fetch_latency_ms"]
    assert h["count"] == 2
    assert h["sum"] == 30.5
    assert h["values"] == [10.5, 20.0]


def test_metrics_strategy_labels_separated():
    m = MetricsCollector()
    m.increment("shard_runs_total", strategy="size")
    m.increment("shard_runs_total", strategy="rendezvous")
    m.increment("shard_runs_total", strategy="size")
    out = m.export_metrics()
    assert out["counters_by_labels"]["shard_runs_total"] == {
        "shard_runs_total:strategy=size": 2,
        "shard_runs_total:strategy=rendezvous": 1,
    }
    assert "shard_runs_total" not in out["counters"]


def test_metrics_failure_category_label():
    m = MetricsCollector()
    m.increment("shard_runs_failed", category="InventoryFetchError")
    labels = m.export_metrics()["counters_by_labels"]["shard_runs_failed"]
    assert labels == {"shard_runs_failed:category=InventoryFetchError": 1}


def test_metrics_reset():
    m = MetricsCollector()
    m.increment("ids_distributed_total")
    m.observe_latency("inventory_fetch_latency_ms", 1.0)
    m.reset()
    assert m.export_metrics() == {"counters": {}, "counters_by_labels": {}, "histograms": {}}


def test_metrics_thread_safe_increments():
    m = MetricsCollector()

    def work():
        for _ in range(1000):
            m.increment("ids_distributed_total")

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert m.export_metrics()["counters"]["ids_distributed_total"] == 4000
