"""
Domain metrics for upi-guard.

Defined once at import time on top of the idempotent factories in
``upi_guard.observability.metrics``.
"""

from upi_guard.observability.metrics import create_counter, create_histogram

# ── Transactions ─────────────────────────────────────────────────

TRANSACTIONS_CLASSIFIED = create_counter(
    "upi_guard_transactions_classified_total",
    "Transactions classified by the anomaly detector, by risk level",
    ["risk"],
)

ANOMALY_SCORE = create_histogram(
    "upi_guard_anomaly_score",
    "Distribution of transaction anomaly scores",
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

# ── Messages ─────────────────────────────────────────────────────

MESSAGES_CHECKED = create_counter(
    "upi_guard_messages_checked_total",
    "Messages checked by the spam detector, by verdict",
    ["verdict"],
)

# ── Alerts ───────────────────────────────────────────────────────

ALERTS_TOTAL = create_counter(
    "upi_guard_alerts_total",
    "Notifications raised, by type and severity",
    ["type", "severity"],
)
