"""Aggregate counters for the dashboard summary cards."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

from upi_guard.anomaly import AnomalyDetector
from upi_guard.models import RiskLevel, Transaction


@dataclass
class DashboardStats:
    total: int = 0
    fraudulent: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    total_amount: float = 0.0
    blocked_amount: float = 0.0  # sum of amounts flagged as fraudulent

    @property
    def fraud_rate(self) -> float:
        return self.fraudulent / self.total if self.total else 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["fraud_rate"] = self.fraud_rate
        return data


def compute_stats(
    transactions: Iterable[Transaction], detector: AnomalyDetector
) -> DashboardStats:
    """Classify every transaction with ``detector`` and tally the outcomes."""
    stats = DashboardStats()
    for transaction in transactions:
        result = detector.classify(transaction)
        stats.total += 1
        stats.total_amount += transaction.amount

        if result.is_fraudulent:
            stats.fraudulent += 1
            stats.blocked_amount += transaction.amount

        if result.risk is RiskLevel.CRITICAL:
            stats.critical += 1
        elif result.risk is RiskLevel.HIGH:
            stats.high += 1
        elif result.risk is RiskLevel.MEDIUM:
            stats.medium += 1
        else:
            stats.low += 1
    return stats
