"""Tests for upi_guard.observability.logging."""

import io
import json
import logging
import unittest
from unittest.mock import patch

from upi_guard.observability.logging import (
    JsonTraceFormatter,
    WebhookAlertHandler,
    is_fraud_alert,
    setup_logging,
)


def _record(level=logging.INFO, msg="hello", **extra):
    record = logging.LogRecord(
        name="test-logger",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonTraceFormatter(unittest.TestCase):
    def test_format_contains_required_fields(self):
        data = json.loads(JsonTraceFormatter().format(_record(msg="hello world")))

        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "test-logger")
        self.assertEqual(data["message"], "hello world")
        self.assertIsInstance(data["timestamp"], float)

    def test_extra_fields_serialized(self):
        record = _record(logging.CRITICAL, "fraud", alert=True, score=0.9)
        data = json.loads(JsonTraceFormatter().format(record))
        self.assertEqual(data["level"], "CRITICAL")
        self.assertTrue(data["alert"])
        self.assertEqual(data["score"], 0.9)

    def test_trace_ids_inside_span(self):
        record = _record(otelTraceID="4bf92f3577b34da6", otelSpanID="00f067aa0ba902b7")
        data = json.loads(JsonTraceFormatter().format(record))
        self.assertEqual(data["trace_id"], "4bf92f3577b34da6")
        self.assertEqual(data["span_id"], "00f067aa0ba902b7")

    def test_no_trace_ids_outside_span(self):
        data = json.loads(JsonTraceFormatter().format(_record(otelTraceID="0", otelSpanID="0")))
        self.assertNotIn("trace_id", data)
        self.assertNotIn("span_id", data)


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        import upi_guard.observability.logging as log_mod
        self._original = log_mod._setup_done
        log_mod._setup_done = False
        self._root = logging.getLogger()
        self._original_handlers = self._root.handlers[:]
        self._original_level = self._root.level

    def tearDown(self):
        import upi_guard.observability.logging as log_mod
        log_mod._setup_done = self._original
        self._root.handlers = self._original_handlers
        self._root.setLevel(self._original_level)

    def test_adds_json_handler_to_root(self):
        setup_logging()
        json_handlers = [
            h for h in self._root.handlers
            if isinstance(h, logging.StreamHandler)
            and isinstance(h.formatter, JsonTraceFormatter)
        ]
        self.assertGreaterEqual(len(json_handlers), 1)

    def test_sets_log_level(self):
        setup_logging(level=logging.DEBUG)
        self.assertEqual(self._root.level, logging.DEBUG)

    def test_idempotent(self):
        setup_logging()
        count_before = len(self._root.handlers)
        setup_logging()
        self.assertEqual(len(self._root.handlers), count_before)

    def test_webhook_handler_attached_when_configured(self):
        setup_logging(webhook_url="http://hooks.local/alert")
        webhooks = [h for h in self._root.handlers if isinstance(h, WebhookAlertHandler)]
        self.assertEqual(len(webhooks), 1)
        self.assertEqual(webhooks[0].webhook_url, "http://hooks.local/alert")

    def test_no_webhook_by_default(self):
        setup_logging()
        self.assertFalse(any(isinstance(h, WebhookAlertHandler) for h in self._root.handlers))

    def test_json_output_is_parseable(self):
        buf = io.StringIO()
        handler = logging.StreamHandler(buf)
        handler.setFormatter(JsonTraceFormatter())
        test_logger = logging.getLogger("json-output-test")
        test_logger.addHandler(handler)
        test_logger.setLevel(logging.INFO)
        try:
            test_logger.info("integration check")
            data = json.loads(buf.getvalue().strip())
            self.assertEqual(data["message"], "integration check")
            self.assertEqual(data["logger"], "json-output-test")
        finally:
            test_logger.removeHandler(handler)


class TestFraudAlertFilter(unittest.TestCase):
    def test_critical_alert(self):
        self.assertTrue(is_fraud_alert(_record(logging.CRITICAL, alert=True)))

    def test_warning_alert_stays_local(self):
        self.assertFalse(is_fraud_alert(_record(logging.WARNING, alert=True)))

    def test_critical_without_alert_flag(self):
        self.assertFalse(is_fraud_alert(_record(logging.CRITICAL)))


@patch("upi_guard.observability.logging.threading.Thread")
class TestWebhookAlertHandler(unittest.TestCase):
    def test_high_risk_warning_not_posted(self, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local")
        handler.handle(_record(logging.WARNING, "high risk", alert=True))
        thread_cls.assert_not_called()

    def test_plain_critical_not_posted(self, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local")
        handler.handle(_record(logging.CRITICAL, "boom"))
        thread_cls.assert_not_called()

    def test_fraud_alert_posted_in_background(self, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local")
        handler.handle(_record(logging.CRITICAL, "FRAUD", alert=True, alert_type="fraud-alert"))

        thread_cls.assert_called_once()
        kwargs = thread_cls.call_args.kwargs
        self.assertEqual(kwargs["target"], handler.post)
        self.assertTrue(kwargs["daemon"])
        self.assertEqual(kwargs["args"][0]["alert_type"], "fraud-alert")
        thread_cls.return_value.start.assert_called_once()

    def test_payload(self, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local")
        record = _record(
            logging.CRITICAL,
            "FRAUD",
            alert=True,
            alert_type="fraud-alert",
            alert_details={"transaction_id": "tx-1"},
            score=1.0,
            service="upi-guard",
            otelTraceID="4bf92f3577b34da6",
        )
        payload = handler.build_payload(record)
        self.assertEqual(payload["severity"], "CRITICAL")
        self.assertEqual(payload["message"], "FRAUD")
        self.assertEqual(payload["alert_type"], "fraud-alert")
        self.assertEqual(payload["alert_details"], {"transaction_id": "tx-1"})
        self.assertEqual(payload["score"], 1.0)
        self.assertEqual(payload["service"], "upi-guard")
        self.assertEqual(payload["trace_id"], "4bf92f3577b34da6")
        self.assertIn("sent_at", payload)

    def test_payload_skips_missing_fields(self, thread_cls):
        payload = WebhookAlertHandler("http://hooks.local").build_payload(
            _record(logging.CRITICAL, "FRAUD", alert=True)
        )
        self.assertNotIn("alert_details", payload)
        self.assertNotIn("score", payload)

    @patch("upi_guard.observability.logging.urlopen")
    def test_post_sends_json(self, mock_urlopen, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local/alert", timeout=2)
        handler.post({"message": "FRAUD"})

        request = mock_urlopen.call_args[0][0]
        self.assertEqual(request.full_url, "http://hooks.local/alert")
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(json.loads(request.data), {"message": "FRAUD"})
        self.assertEqual(mock_urlopen.call_args[1]["timeout"], 2)

    @patch("upi_guard.observability.logging.urlopen", side_effect=OSError("refused"))
    def test_post_failure_is_logged_not_raised(self, mock_urlopen, thread_cls):
        handler = WebhookAlertHandler("http://hooks.local/alert")
        with self.assertLogs("webhook", level="DEBUG") as logs:
            handler.post({"message": "FRAUD"})
        self.assertIn("refused", logs.output[0])
