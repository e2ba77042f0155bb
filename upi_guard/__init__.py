"""
UPI fraud and spam risk scoring.

Provides a weighted-feature anomaly detector for payment transactions and
a pattern-based spam detector for the messages that often precede them.

Usage::

    from upi_guard import AnomalyDetector, SpamDetector, Transaction

    detector = AnomalyDetector()
    result = detector.classify(Transaction.model_validate(payload))
    print(result.risk, result.explanation)

    spam = SpamDetector(trusted_senders=["HDFC-Bank"])
    print(spam.is_spam("You won a prize!", "Prize-Alert"))
"""

__version__ = "0.1.0"

from .models import (
    ClassificationResult,
    RiskLevel,
    SpamMessage,
    SpamResult,
    Transaction,
    TransactionFeatures,
    TransactionStatus,
    TransactionType,
)
from .anomaly import AnomalyDetector
from .spam import SpamDetector

__all__ = [
    "AnomalyDetector",
    "SpamDetector",
    "Transaction",
    "TransactionFeatures",
    "TransactionStatus",
    "TransactionType",
    "SpamMessage",
    "ClassificationResult",
    "SpamResult",
    "RiskLevel",
]
