"""Shared fixtures for the upi_guard test-suite."""

from datetime import datetime

import pytest

from upi_guard.models import Transaction

_DEFAULT_FEATURES = {
    "time_since_last_transaction": 300,
    "amount_deviation": 0.0,
    "unusual_location": False,
    "unusual_device": False,
    "unusual_hour": False,
    "first_time_receiver": False,
}


def make_transaction(tx_id: str = "tx-1", amount: float = 500, **overrides) -> Transaction:
    """
    Build a valid transaction; feature overrides go straight into ``features``.

    Non-feature fields (``receiver``, ``location``...) can be overridden too.
    """
    features = dict(_DEFAULT_FEATURES)
    fields = {
        "id": tx_id,
        "amount": amount,
        "timestamp": datetime(2024, 5, 1, 14, 30),
        "sender": "user1@upi",
        "receiver": "friend1@upi",
        "location": "Mumbai",
        "device": "iPhone 12",
        "transaction_type": "p2p",
        "status": "completed",
    }
    for key, value in overrides.items():
        if key in features:
            features[key] = value
        else:
            fields[key] = value
    return Transaction(features=features, **fields)


@pytest.fixture
def transaction_factory():
    return make_transaction
