"""
Data model for transactions, spam messages and classification results.

Inputs are pydantic models validated at construction time, so a detector
never sees a transaction with missing or non-numeric features. Results are
plain dataclasses produced by the detectors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def format_decimal(value: float) -> str:
    """
    Render a number the way a message would quote it.

    ``1500.0`` -> ``"1500"``, ``2.5`` -> ``"2.5"``. Magnitudes from ``1e21``
    switch to exponent form with a signed, unpadded exponent
    (``1e21`` -> ``"1e+21"``).
    """
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    mantissa, sep, exponent = repr(value).partition("e")
    if sep:
        return f"{mantissa}e{int(exponent):+d}"
    return mantissa


class RiskLevel(str, Enum):
    """Discretized anomaly score, ordered from least to most severe."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TransactionType(str, Enum):
    P2P = "p2p"
    MERCHANT = "merchant"
    BILL = "bill"
    RECHARGE = "recharge"


class TransactionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class _Record(BaseModel):
    # Accept both snake_case and the camelCase keys UI collaborators send
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class TransactionFeatures(_Record):
    """Precomputed behavioral signals for one transaction."""

    time_since_last_transaction: float = Field(
        ge=0, allow_inf_nan=False,
        description="Minutes since the sender's previous transaction",
    )
    amount_deviation: float = Field(
        ge=0, allow_inf_nan=False,
        description="Relative deviation of the amount from the sender's mean",
    )
    unusual_location: bool
    unusual_device: bool
    unusual_hour: bool
    first_time_receiver: bool


class Transaction(_Record):
    """A UPI payment as produced by the transaction feed."""

    id: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    timestamp: datetime
    sender: str
    receiver: str
    location: str
    device: str
    transaction_type: TransactionType
    status: TransactionStatus
    features: TransactionFeatures


class SpamMessage(_Record):
    """An inbound text message and the ID it claims to come from."""

    sender: str
    message: str


@dataclass
class ClassificationResult:
    """Anomaly classification of a single transaction."""

    score: float
    risk: RiskLevel
    is_fraudulent: bool
    explanation: list[str] = field(default_factory=list)
    transaction_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "risk": self.risk.value,
            "isFraudulent": self.is_fraudulent,
            "explanation": list(self.explanation),
        }


@dataclass
class SpamResult:
    """Spam verdict for a message/sender pair."""

    is_spam: bool
    score: float
    reason: str
    signals: tuple[str, ...] = ()  # feature names that fired, in check order

    def to_dict(self) -> dict[str, Any]:
        return {"isSpam": self.is_spam, "score": self.score, "reason": self.reason}
