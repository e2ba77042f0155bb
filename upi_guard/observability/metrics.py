"""
Prometheus collectors for upi-guard.

Detector modules define their metrics at import time. Re-importing a module
(or re-creating a metric in a test) returns the collector already in the
default registry instead of failing on a duplicate name.
"""

import os

from prometheus_client import REGISTRY, Counter, Histogram, Info, generate_latest


def _registered(name):
    # a counter created as "x_total" keeps "x" as its _name
    names = {name, name.removesuffix("_total")}
    for collector in REGISTRY._names_to_collectors.values():
        if getattr(collector, "_name", None) in names:
            return collector
    return None


def _collector(metric_cls, name, documentation, **kwargs):
    existing = _registered(name)
    if existing is not None:
        return existing
    return metric_cls(name, documentation, **kwargs)


def create_counter(name: str, documentation: str, labelnames: list[str] = None) -> Counter:
    return _collector(Counter, name, documentation, labelnames=labelnames or ())


def create_histogram(
    name: str,
    documentation: str,
    buckets: list[float] = None,
    labelnames: list[str] = None,
) -> Histogram:
    kwargs = {"labelnames": labelnames or ()}
    if buckets:
        kwargs["buckets"] = buckets
    return _collector(Histogram, name, documentation, **kwargs)


def create_service_info(service_name: str, version: str, environment: str | None = None) -> Info:
    """
    Publish ``<service_name>_info{version, environment}``.

    ``environment`` defaults to ``$ENVIRONMENT``, then ``"development"``.
    """
    info = _collector(Info, service_name, "Service metadata")
    info.info({
        "version": version,
        "environment": environment or os.environ.get("ENVIRONMENT", "development"),
    })
    return info


def render_metrics() -> str:
    """Current values of every registered collector, in exposition format."""
    return generate_latest(REGISTRY).decode("utf-8")
