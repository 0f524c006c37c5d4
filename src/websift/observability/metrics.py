"""
Defines the Prometheus metrics for the application.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Gauge as _OrigGauge
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Re-importing this module (test reloads, uvicorn --reload) must not fail with
# "Duplicated timeseries in CollectorRegistry".


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        existing = _PROM_REGISTRY._names_to_collectors.get(name)
        if existing is not None:
            return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race - fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Gauge = _duplicate_safe_factory(_OrigGauge)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "scrapes_total": Counter(
            "websift_scrapes_total",
            "Extractions completed by the orchestrator",
            ["method", "outcome"],
        ),
        "scrape_duration_seconds": Histogram(
            "websift_scrape_duration_seconds",
            "End-to-end extraction time including fallback",
            buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        ),
        "fetch_responses_total": Counter(
            "websift_fetch_responses_total",
            "HTTP responses received by status class",
            ["status_class"],
        ),
        "fetch_latency_seconds": Histogram(
            "websift_fetch_latency_seconds",
            "Time taken to fetch a URL",
            buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0],
        ),
        "fetch_in_flight": Gauge(
            "websift_fetch_in_flight_requests",
            "Number of HTTP requests currently in flight",
        ),
        "search_requests_total": Counter(
            "websift_search_requests_total",
            "Search provider calls by outcome",
            ["provider", "outcome"],
        ),
        "search_demo_fallback_total": Counter(
            "websift_search_demo_fallback_total",
            "Searches answered from the demonstration result set",
        ),
        "batch_items_total": Counter(
            "websift_batch_items_total",
            "Batch scrape items by outcome",
            ["outcome"],
        ),
        "robots_disallowed_total": Counter(
            "websift_robots_disallowed_total",
            "Extractions whose target robots.txt disallows the path",
        ),
        "browser_launches_total": Counter(
            "websift_browser_launches_total",
            "Headless browser launches",
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
