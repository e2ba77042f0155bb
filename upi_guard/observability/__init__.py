"""
Logging, metrics and tracing for upi-guard.

Submodules
----------
logging      JSON log lines with trace ids; webhook delivery of fraud alerts.
metrics      Prometheus collectors and exposition rendering.
tracing      OpenTelemetry tracer provider with the OTLP HTTP exporter.
testing      In-memory span exporter and registry reset for tests.

Quick start
-----------
::

    from upi_guard.config import Settings
    from upi_guard.observability import init_observability

    init_observability("upi-guard", "0.1.0", Settings.from_env())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .logging import JsonTraceFormatter, WebhookAlertHandler, setup_logging
from .metrics import create_counter, create_histogram, create_service_info, render_metrics
from .tracing import init_tracing, shutdown_tracing

if TYPE_CHECKING:
    from upi_guard.config import Settings


def init_observability(service_name: str, version: str, settings: "Settings") -> None:
    """
    Configure logging from ``settings``, start tracing when an OTLP endpoint
    is set, and publish the service-info metric.

    A tracing setup failure is logged as a warning; the session still runs.
    """
    setup_logging(settings.log_level, webhook_url=settings.alert_webhook_url)
    logger = logging.getLogger(service_name)

    if settings.otlp_endpoint:
        try:
            init_tracing(service_name, settings.otlp_endpoint)
        except Exception as exc:
            logger.warning("Tracing disabled, exporter setup failed: %s", exc)
    else:
        logger.info("Tracing disabled (OTEL_EXPORTER_OTLP_ENDPOINT not set)")

    create_service_info(service_name.replace("-", "_"), version, settings.environment)
    logger.info("%s %s started in %s", service_name, version, settings.environment)


__all__ = [
    "init_observability",
    "setup_logging",
    "JsonTraceFormatter",
    "WebhookAlertHandler",
    "create_counter",
    "create_histogram",
    "create_service_info",
    "render_metrics",
    "init_tracing",
    "shutdown_tracing",
]
