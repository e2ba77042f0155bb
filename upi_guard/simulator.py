"""
Deterministic transaction and spam-message simulator.

Generates realistic-looking UPI traffic for demos and test fixtures.
Three users have fixed spending habits; about one transaction in five
deviates from them. The same seed always yields the same stream.

Usage::

    from upi_guard.simulator import TransactionSimulator

    sim = TransactionSimulator(seed=42)
    batch = sim.generate_batch(50)
    spam = sim.generate_spam_message()
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

from upi_guard.models import SpamMessage, Transaction, TransactionFeatures

ANOMALY_RATE = 0.2


@dataclass(frozen=True)
class UserPattern:
    typical_amounts: tuple[int, ...]
    common_receivers: tuple[str, ...]
    common_locations: tuple[str, ...]
    common_devices: tuple[str, ...]
    typical_hours: tuple[int, ...]

    @property
    def mean_amount(self) -> float:
        return sum(self.typical_amounts) / len(self.typical_amounts)


USER_PATTERNS = {
    "user1@upi": UserPattern(
        typical_amounts=(100, 200, 500, 1000),
        common_receivers=("merchant1@upi", "friend1@upi", "bill1@upi"),
        common_locations=("Mumbai", "Delhi"),
        common_devices=("iPhone 12", "MacBook Pro"),
        typical_hours=(8, 9, 12, 13, 18, 19, 20),
    ),
    "user2@upi": UserPattern(
        typical_amounts=(50, 150, 300, 800),
        common_receivers=("merchant2@upi", "friend2@upi", "bill2@upi"),
        common_locations=("Bangalore", "Hyderabad"),
        common_devices=("Samsung S21", "Windows PC"),
        typical_hours=(7, 8, 13, 14, 19, 20, 21),
    ),
    "user3@upi": UserPattern(
        typical_amounts=(200, 400, 600, 1200),
        common_receivers=("merchant3@upi", "friend3@upi", "bill3@upi"),
        common_locations=("Chennai", "Kolkata"),
        common_devices=("Xiaomi Mi 11", "Lenovo Laptop"),
        typical_hours=(9, 10, 12, 13, 17, 18, 19),
    ),
}

LOCATIONS = (
    "Mumbai", "Delhi", "Bangalore", "Hyderabad", "Chennai",
    "Kolkata", "Pune", "Jaipur", "Ahmedabad", "Lucknow",
)
DEVICES = (
    "iPhone 12", "iPhone 13", "Samsung S21", "Samsung S22", "Xiaomi Mi 11",
    "OnePlus 9", "MacBook Pro", "Windows PC", "Lenovo Laptop", "Dell XPS",
)
TRANSACTION_TYPES = ("p2p", "merchant", "bill", "recharge")
MERCHANTS = tuple(f"merchant{i}@upi" for i in range(1, 6))
UNKNOWN_RECEIVERS = tuple(f"unknown{i}@upi" for i in range(1, 6))

SPAM_TEMPLATES = (
    SpamMessage(
        sender="Prize-Alert",
        message="Congratulations! You've won ₹10,000 in our UPI Lottery. "
        "Click here to claim: bit.ly/claim-now",
    ),
    SpamMessage(
        sender="Bank-Verify",
        message="URGENT: Your UPI account will be suspended. "
        "Verify now by sending ₹1 to verify-upi@ybl",
    ),
    SpamMessage(
        sender="Refund-Service",
        message="Your payment of ₹1,499 failed. "
        "Retry payment now or get refund: tinyurl.com/refund-upi",
    ),
    SpamMessage(
        sender="KYC-Update",
        message="Your UPI KYC verification expired. "
        "Send ₹10 to kyc-verify@upi to continue services.",
    ),
    SpamMessage(
        sender="Account-Alert",
        message="WARNING: Suspicious login detected on your UPI account. "
        "Verify identity: goo.gl/secure-upi",
    ),
)


class TransactionSimulator:
    """
    Seeded generator of transactions and spam messages.

    Args:
        seed: Seed for the underlying ``numpy.random.RandomState``.
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self._rng = np.random.RandomState(seed)

    def _pick(self, options: Sequence):
        return options[self._rng.randint(len(options))]

    def _pick_outside(self, options: Sequence, usual: Sequence):
        return self._pick([o for o in options if o not in usual])

    def generate_transaction(self, now: Optional[datetime] = None) -> Transaction:
        """Generate one transaction dated today (or ``now``'s day) at a simulated hour."""
        rng = self._rng
        sender = self._pick(list(USER_PATTERNS))
        pattern = USER_PATTERNS[sender]

        if rng.random_sample() < ANOMALY_RATE:
            if rng.random_sample() < 0.7:
                amount = int(rng.randint(0, 10000)) + 2000
            else:
                amount = self._pick(pattern.typical_amounts)
            if rng.random_sample() < 0.7:
                receiver = self._pick(UNKNOWN_RECEIVERS)
            else:
                receiver = self._pick(pattern.common_receivers)
            if rng.random_sample() < 0.5:
                location = self._pick_outside(LOCATIONS, pattern.common_locations)
            else:
                location = self._pick(pattern.common_locations)
            if rng.random_sample() < 0.5:
                device = self._pick_outside(DEVICES, pattern.common_devices)
            else:
                device = self._pick(pattern.common_devices)
            if rng.random_sample() < 0.5:
                hour = self._pick_outside(range(24), pattern.typical_hours)
            else:
                hour = self._pick(pattern.typical_hours)
        else:
            amount = self._pick(pattern.typical_amounts)
            receiver = self._pick(pattern.common_receivers)
            location = self._pick(pattern.common_locations)
            device = self._pick(pattern.common_devices)
            hour = self._pick(pattern.typical_hours)

        timestamp = (now or datetime.now(timezone.utc)).replace(hour=hour)
        transaction_type = self._pick(TRANSACTION_TYPES)
        time_since_last = int(rng.randint(1, 301))
        mean = pattern.mean_amount

        features = TransactionFeatures(
            time_since_last_transaction=time_since_last,
            amount_deviation=abs(amount - mean) / mean,
            unusual_location=location not in pattern.common_locations,
            unusual_device=device not in pattern.common_devices,
            unusual_hour=hour not in pattern.typical_hours,
            first_time_receiver=(
                receiver not in pattern.common_receivers and receiver not in MERCHANTS
            ),
        )

        if rng.random_sample() < 0.95:
            status = "completed"
        else:
            status = "pending" if rng.random_sample() < 0.5 else "failed"

        return Transaction(
            id=f"{int(rng.randint(0, 2**31 - 1)):08x}{int(rng.randint(0, 2**31 - 1)):08x}",
            amount=amount,
            timestamp=timestamp,
            sender=sender,
            receiver=receiver,
            location=location,
            device=device,
            transaction_type=transaction_type,
            status=status,
            features=features,
        )

    def generate_batch(self, count: int, now: Optional[datetime] = None) -> list[Transaction]:
        if count < 0:
            raise ValueError("count must be non-negative")
        return [self.generate_transaction(now) for _ in range(count)]

    def generate_spam_message(self) -> SpamMessage:
        return self._pick(SPAM_TEMPLATES)
