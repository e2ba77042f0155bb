"""
Weighted-feature anomaly detector for UPI transactions.

Each transaction carries a bundle of precomputed behavioral features
(see ``TransactionFeatures``). The detector combines them into a single
risk score in [0, 1] and maps the score onto a risk ladder:

    score < 0.3   low
    score < 0.5   medium
    score < 0.7   high
    otherwise     critical   (flagged as fraudulent)

A capped history of recent transactions is kept for review of
recently flagged payments; it does not feed back into the score.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Iterable, Optional

from opentelemetry import trace

from upi_guard import telemetry
from upi_guard.models import (
    ClassificationResult,
    RiskLevel,
    Transaction,
    format_decimal,
)

logger = logging.getLogger(__name__)

# Weights sum to 1.0
FEATURE_WEIGHTS = {
    "amount_deviation": 0.35,
    "time_since_last_transaction": 0.15,
    "unusual_location": 0.15,
    "unusual_device": 0.15,
    "unusual_hour": 0.10,
    "first_time_receiver": 0.10,
}

# Exclusive upper bounds of the low / medium / high buckets
RISK_THRESHOLDS = {
    "low": 0.3,
    "medium": 0.5,
    "high": 0.7,
}

# Gaps at or beyond this many minutes contribute nothing to the recency term
RECENCY_WINDOW_MINUTES = 300

MAX_HISTORY = 100

# Explanation triggers
LARGE_DEVIATION = 1.5
RAPID_SUCCESSION_MINUTES = 5

NORMAL_PATTERN_MESSAGE = "Transaction matches normal pattern for this user"
COMBINED_ANOMALIES_MESSAGE = "Multiple small anomalies detected in combination"


def risk_for_score(score: float) -> RiskLevel:
    """Map an anomaly score onto the risk ladder."""
    if score < RISK_THRESHOLDS["low"]:
        return RiskLevel.LOW
    elif score < RISK_THRESHOLDS["medium"]:
        return RiskLevel.MEDIUM
    elif score < RISK_THRESHOLDS["high"]:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def _require_transaction(transaction) -> Transaction:
    if not isinstance(transaction, Transaction):
        raise TypeError(
            f"expected a Transaction, got {type(transaction).__name__}; "
            "build one with Transaction.model_validate(...)"
        )
    return transaction


class AnomalyDetector:
    """
    Rule-based anomaly scorer with a bounded transaction history.

    One instance per session; pass it to whatever needs to classify
    transactions rather than sharing a module-level singleton.

    Args:
        initial_transactions: Optional historical transactions to seed the
            history with. Only the newest ``MAX_HISTORY`` are kept.
    """

    def __init__(self, initial_transactions: Optional[Iterable[Transaction]] = None):
        self._history: deque[Transaction] = deque(maxlen=MAX_HISTORY)
        for transaction in initial_transactions or ():
            self._history.append(_require_transaction(transaction))

    @property
    def recent_transactions(self) -> tuple[Transaction, ...]:
        """Snapshot of the history, oldest first."""
        return tuple(self._history)

    def add_transaction(self, transaction: Transaction) -> None:
        """Append to the history, evicting the oldest entry past ``MAX_HISTORY``."""
        self._history.append(_require_transaction(transaction))

    def get_anomaly_score(self, transaction: Transaction) -> float:
        """
        Score a transaction in [0, 1]; higher is more anomalous.

        The amount-deviation term is not clamped on its own, so a large
        deviation can saturate the score by itself. Only the total is
        capped at 1.0.
        """
        features = _require_transaction(transaction).features

        score = 0.0
        score += features.amount_deviation * FEATURE_WEIGHTS["amount_deviation"]

        # Shorter gaps since the previous transaction are more suspicious
        recency = 1 - features.time_since_last_transaction / RECENCY_WINDOW_MINUTES
        recency = max(0.0, min(1.0, recency))
        score += recency * FEATURE_WEIGHTS["time_since_last_transaction"]

        if features.unusual_location:
            score += FEATURE_WEIGHTS["unusual_location"]
        if features.unusual_device:
            score += FEATURE_WEIGHTS["unusual_device"]
        if features.unusual_hour:
            score += FEATURE_WEIGHTS["unusual_hour"]
        if features.first_time_receiver:
            score += FEATURE_WEIGHTS["first_time_receiver"]

        return min(1.0, score)

    def classify(self, transaction: Transaction) -> ClassificationResult:
        """
        Score a transaction, grade it and explain the grade.

        Returns:
            ClassificationResult with score, risk level, fraud flag and a
            non-empty list of human-readable reasons.
        """
        tracer = trace.get_tracer(__name__)
        with tracer.start_as_current_span("classify transaction") as span:
            score = self.get_anomaly_score(transaction)
            risk = risk_for_score(score)
            result = ClassificationResult(
                score=score,
                risk=risk,
                is_fraudulent=risk is RiskLevel.CRITICAL,
                explanation=self._explain(transaction, score),
                transaction_id=transaction.id,
            )
            span.set_attribute("transaction.id", transaction.id)
            span.set_attribute("anomaly.score", score)
            span.set_attribute("anomaly.risk", risk.value)

        telemetry.TRANSACTIONS_CLASSIFIED.labels(risk=risk.value).inc()
        telemetry.ANOMALY_SCORE.observe(score)
        logger.debug(
            "Classified transaction %s: score=%.4f risk=%s",
            transaction.id,
            score,
            risk.value,
        )
        return result

    # Original name used by the dashboard widgets
    classify_transaction = classify

    def _explain(self, transaction: Transaction, score: float) -> list[str]:
        features = transaction.features
        explanation = []

        if features.amount_deviation > LARGE_DEVIATION:
            explanation.append(
                f"Transaction amount (₹{format_decimal(transaction.amount)}) is "
                "significantly different from user's typical amounts"
            )
        if features.unusual_location:
            explanation.append(
                f'Transaction location "{transaction.location}" is unusual for this user'
            )
        if features.unusual_device:
            explanation.append(
                f"Transaction was made from an unusual device: {transaction.device}"
            )
        if features.unusual_hour:
            ts = transaction.timestamp
            explanation.append(
                f"Transaction time ({ts.hour}:{ts.minute}) is unusual for this user"
            )
        if features.first_time_receiver:
            explanation.append(f"First transaction to receiver: {transaction.receiver}")
        if features.time_since_last_transaction < RAPID_SUCCESSION_MINUTES:
            explanation.append(
                "Very short time since last transaction "
                f"({format_decimal(features.time_since_last_transaction)} minutes)"
            )

        if not explanation:
            if score < RISK_THRESHOLDS["low"]:
                explanation.append(NORMAL_PATTERN_MESSAGE)
            else:
                explanation.append(COMBINED_ANOMALIES_MESSAGE)
        return explanation

    def get_recent_fraudulent_transactions(self) -> list[Transaction]:
        """History entries scoring at or above the high threshold, oldest first."""
        return [
            t for t in self._history
            if self.get_anomaly_score(t) >= RISK_THRESHOLDS["high"]
        ]
