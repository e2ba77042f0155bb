import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

TRACES_PATH = "/v1/traces"


def traces_url(endpoint: str) -> str:
    """``http://collector:4318`` -> ``http://collector:4318/v1/traces``."""
    endpoint = endpoint.rstrip("/")
    if endpoint.endswith(TRACES_PATH):
        return endpoint
    return endpoint + TRACES_PATH


def init_tracing(service_name: str, endpoint: str) -> None:
    """Export spans for ``service_name`` to the OTLP HTTP collector at ``endpoint``."""
    url = traces_url(endpoint)
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=url)))
    trace.set_tracer_provider(provider)
    logger.info("Exporting %s spans to %s", service_name, url)


def shutdown_tracing() -> None:
    """Flush pending spans. A no-op when no SDK provider was installed."""
    provider = trace.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        return
    try:
        provider.shutdown()
    except Exception as exc:
        logger.warning("Span flush on shutdown failed: %s", exc)
