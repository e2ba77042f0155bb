"""
JSON log lines for upi-guard, with fraud alerts optionally pushed to a webhook.

Every line carries ``timestamp``, ``level``, ``logger`` and ``message``,
plus ``trace_id``/``span_id`` when it was written inside a span. Fields
passed through ``extra=`` are serialized as they are.

``AlertDispatcher`` tags its alert records with ``alert=True`` and an
``alert_type``. Confirmed fraud is logged at CRITICAL, and only those
records leave the process through ``WebhookAlertHandler``.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from urllib.request import Request, urlopen

from opentelemetry.instrumentation.logging import LoggingInstrumentor
from pythonjsonlogger.json import JsonFormatter

# fields copied from an alert record into the webhook body
ALERT_FIELDS = ("alert_type", "alert_details", "score", "service")

_setup_done = False


class JsonTraceFormatter(JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=record.created,
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        # LoggingInstrumentor writes "0" outside a span
        trace_id = getattr(record, "otelTraceID", "0")
        if trace_id != "0":
            log_record["trace_id"] = trace_id
            log_record["span_id"] = getattr(record, "otelSpanID", "0")


def is_fraud_alert(record: logging.LogRecord) -> bool:
    return record.levelno >= logging.CRITICAL and bool(getattr(record, "alert", False))


class WebhookAlertHandler(logging.Handler):
    """
    POSTs fraud alerts to ``webhook_url`` as JSON.

    Each POST runs on its own daemon thread. Delivery failures are logged
    at DEBUG on the ``webhook`` logger and never reach the caller.
    """

    def __init__(self, webhook_url: str, timeout: float = 5):
        super().__init__()
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.addFilter(is_fraud_alert)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = self.build_payload(record)
        except Exception:
            self.handleError(record)
            return
        threading.Thread(target=self.post, args=(payload,), daemon=True).start()

    def build_payload(self, record: logging.LogRecord) -> dict:
        payload = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "sent_at": datetime.now(timezone.utc).isoformat(),
            "trace_id": getattr(record, "otelTraceID", ""),
        }
        for name in ALERT_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        return payload

    def post(self, payload: dict) -> None:
        request = Request(
            self.webhook_url,
            data=json.dumps(payload, default=str).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urlopen(request, timeout=self.timeout):
                pass
        except (OSError, ValueError) as exc:
            # DEBUG keeps the failure below this handler's CRITICAL filter
            logging.getLogger("webhook").debug(
                "Alert POST to %s failed: %s", self.webhook_url, exc
            )


def setup_logging(level: int = logging.INFO, webhook_url: str | None = None) -> None:
    """
    Install the JSON handler (and the webhook handler, when a URL is given)
    on the root logger. Only the first call in a process has any effect.
    """
    global _setup_done
    if _setup_done:
        return
    _setup_done = True

    LoggingInstrumentor().instrument(set_logging_format=False)

    root = logging.getLogger()
    root.setLevel(level)
    stream = logging.StreamHandler()
    stream.setFormatter(JsonTraceFormatter())
    root.addHandler(stream)

    if webhook_url:
        root.addHandler(WebhookAlertHandler(webhook_url))
        logging.getLogger(__name__).info("Fraud alerts will be POSTed to %s", webhook_url)
