"""
Alert dispatcher: turns classification results into notifications.

The dispatcher:
  1. Evaluates transaction and spam classification results
  2. Logs at WARNING (high risk) or CRITICAL (fraud, webhook-eligible)
  3. Updates the Prometheus alert counter
  4. Keeps a newest-first list of notifications with read/unread state
  5. Enforces an optional cooldown per counterparty to prevent alert storms

Severity routing:
  - high risk      → WARNING log + "fraud-alert" notification
  - critical risk  → CRITICAL log (alert=True) + "fraud-alert" notification
  - spam message   → WARNING log + "spam-blocked" notification
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from opentelemetry import trace

from upi_guard import telemetry
from upi_guard.models import (
    ClassificationResult,
    RiskLevel,
    SpamMessage,
    SpamResult,
    Transaction,
    format_decimal,
)

logger = logging.getLogger("alerting")

DEFAULT_COOLDOWN_SECONDS = 0


class NotificationType(str, Enum):
    FRAUD_ALERT = "fraud-alert"
    SPAM_BLOCKED = "spam-blocked"
    INFO = "info"


@dataclass
class Notification:
    """A user-facing notification record."""

    type: NotificationType
    title: str
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    is_read: bool = False


class AlertDispatcher:
    """
    Dispatches classification results as notifications and log alerts.

    Args:
        cooldown_seconds: Minimum seconds between notifications of the same
            type for the same counterparty (receiver or spam sender).
            ``0`` disables the cooldown.
    """

    def __init__(self, cooldown_seconds: int = DEFAULT_COOLDOWN_SECONDS):
        self.cooldown_seconds = cooldown_seconds
        self.blocked_spam_count = 0
        self._notifications: list[Notification] = []
        # Tracks last alert time per (counterparty, type) key
        self._last_alerted: dict[tuple[str, NotificationType], float] = {}

    @property
    def notifications(self) -> list[Notification]:
        """All notifications, newest first."""
        return list(reversed(self._notifications))

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.is_read)

    def _cooling_down(self, key: tuple[str, NotificationType]) -> bool:
        if self.cooldown_seconds <= 0:
            return False
        now = time.monotonic()
        last = self._last_alerted.get(key)
        if last is not None and (now - last) < self.cooldown_seconds:
            return True
        self._last_alerted[key] = now
        return False

    def _push(self, notification: Notification, severity: str) -> Notification:
        self._notifications.append(notification)
        telemetry.ALERTS_TOTAL.labels(
            type=notification.type.value, severity=severity
        ).inc()
        return notification

    def dispatch_transaction(
        self, transaction: Transaction, result: ClassificationResult
    ) -> Optional[Notification]:
        """
        Raise a fraud alert for a high or critical classification.

        Returns:
            The notification created, or ``None`` when the result is below
            high risk or the receiver is still cooling down.
        """
        if result.risk not in (RiskLevel.HIGH, RiskLevel.CRITICAL):
            return None
        if self._cooling_down((transaction.receiver, NotificationType.FRAUD_ALERT)):
            logger.debug("Fraud alert for %s suppressed by cooldown", transaction.receiver)
            return None

        amount = format_decimal(transaction.amount)
        alert_details = {
            "transaction_id": transaction.id,
            "sender": transaction.sender,
            "receiver": transaction.receiver,
            "amount": transaction.amount,
            "risk": result.risk.value,
            "explanation": list(result.explanation),
        }

        tracer = trace.get_tracer(__name__)
        with tracer.start_as_current_span(
            "dispatch fraud alert",
            attributes={
                "alert.transaction_id": transaction.id,
                "alert.risk": result.risk.value,
                "alert.score": result.score,
            },
        ):
            extra = {
                "alert": True,
                "alert_type": NotificationType.FRAUD_ALERT.value,
                "alert_details": alert_details,
                "score": result.score,
                "service": "upi-guard",
            }
            if result.is_fraudulent:
                severity = "CRITICAL"
                logger.critical(
                    "FRAUD: transaction %s of ₹%s from %s to %s (score=%.2f)",
                    transaction.id,
                    amount,
                    transaction.sender,
                    transaction.receiver,
                    result.score,
                    extra=extra,
                )
            else:
                severity = "WARNING"
                logger.warning(
                    "SUSPICIOUS: transaction %s of ₹%s from %s to %s (score=%.2f)",
                    transaction.id,
                    amount,
                    transaction.sender,
                    transaction.receiver,
                    result.score,
                    extra=extra,
                )

        return self._push(
            Notification(
                type=NotificationType.FRAUD_ALERT,
                title="Suspicious Transaction Detected",
                message=f"Transaction of ₹{amount} to {transaction.receiver} looks suspicious",
            ),
            severity,
        )

    def dispatch_spam(
        self, message: SpamMessage, result: SpamResult
    ) -> Optional[Notification]:
        """Record a blocked spam message; non-spam results return ``None``."""
        if not result.is_spam:
            return None

        self.blocked_spam_count += 1
        if self._cooling_down((message.sender, NotificationType.SPAM_BLOCKED)):
            logger.debug("Spam notification for %s suppressed by cooldown", message.sender)
            return None

        logger.warning(
            "SPAM: blocked message from %s (%s, score=%.2f)",
            message.sender,
            result.reason,
            result.score,
            extra={
                "alert": True,
                "alert_type": NotificationType.SPAM_BLOCKED.value,
                "alert_details": {"sender": message.sender, "reason": result.reason},
                "score": result.score,
                "service": "upi-guard",
            },
        )
        return self._push(
            Notification(
                type=NotificationType.SPAM_BLOCKED,
                title="Spam Messages Blocked",
                message=f"Blocked a message from {message.sender}: {result.reason}",
            ),
            "WARNING",
        )

    def notify_info(self, title: str, message: str) -> Notification:
        """Add an informational notification (e.g. a welcome message)."""
        return self._push(
            Notification(type=NotificationType.INFO, title=title, message=message),
            "INFO",
        )

    def mark_as_read(self, notification_id: str) -> None:
        for notification in self._notifications:
            if notification.id == notification_id:
                notification.is_read = True
                return
        raise KeyError(notification_id)

    def mark_all_as_read(self) -> None:
        for notification in self._notifications:
            notification.is_read = True

    def reset_cooldowns(self) -> None:
        """Clear all cooldown timers (useful for testing)."""
        self._last_alerted.clear()
