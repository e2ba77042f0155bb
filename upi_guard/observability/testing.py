"""
Test utilities for the observability stack.

In-memory tracing exporter setup, span lookup by name, and a helper to
reset the Prometheus collector registry between tests.
"""

from prometheus_client import REGISTRY
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter


def setup_test_tracing(service_name: str = "test-service") -> InMemorySpanExporter:
    """
    Install a TracerProvider backed by an InMemorySpanExporter.

    Forcefully replaces any existing provider so it works across tests.
    Returns the exporter so spans can be inspected.
    """
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    # bypass the "already set" guard
    trace._TRACER_PROVIDER = None
    trace._TRACER_PROVIDER_SET_ONCE._done = False
    trace.set_tracer_provider(provider)
    return exporter


def get_spans_by_name(exporter: InMemorySpanExporter, name: str) -> list[ReadableSpan]:
    """Filter exported spans by operation name."""
    return [s for s in exporter.get_finished_spans() if s.name == name]


def reset_metrics(prefix: str = "") -> None:
    """
    Unregister the collectors whose name starts with ``prefix`` (all
    user-created collectors by default) from the default registry.

    Platform collectors (``gc``, ``process``, ``platform``) are kept.
    """
    # platform collectors don't have _name; a collector appears once per series name
    doomed = {
        id(collector): collector
        for collector in list(REGISTRY._names_to_collectors.values())
        if hasattr(collector, "_name") and collector._name.startswith(prefix)
    }
    for collector in doomed.values():
        REGISTRY.unregister(collector)
