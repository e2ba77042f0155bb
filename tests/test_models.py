"""Tests for input validation at the model boundary."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from upi_guard.models import (
    SpamMessage,
    Transaction,
    TransactionFeatures,
    TransactionStatus,
    TransactionType,
    format_decimal,
)


def _camel_payload(**feature_overrides) -> dict:
    features = {
        "timeSinceLastTransaction": 42,
        "amountDeviation": 0.25,
        "unusualLocation": False,
        "unusualDevice": True,
        "unusualHour": False,
        "firstTimeReceiver": False,
    }
    features.update(feature_overrides)
    return {
        "id": "abc123",
        "amount": 250,
        "timestamp": "2024-05-01T09:15:00",
        "sender": "user2@upi",
        "receiver": "merchant2@upi",
        "location": "Bangalore",
        "device": "Samsung S21",
        "transactionType": "merchant",
        "status": "pending",
        "features": features,
    }


class TestTransaction:
    def test_accepts_camel_case_payload(self):
        tx = Transaction.model_validate(_camel_payload())
        assert tx.transaction_type is TransactionType.MERCHANT
        assert tx.status is TransactionStatus.PENDING
        assert tx.timestamp == datetime(2024, 5, 1, 9, 15)
        assert tx.features.unusual_device is True
        assert tx.features.time_since_last_transaction == 42.0

    def test_accepts_snake_case(self, transaction_factory):
        tx = transaction_factory(transaction_type="bill", status="failed")
        assert tx.transaction_type is TransactionType.BILL

    def test_missing_features_rejected(self):
        payload = _camel_payload()
        del payload["features"]
        with pytest.raises(ValidationError):
            Transaction.model_validate(payload)

    def test_missing_feature_field_rejected(self):
        payload = _camel_payload()
        del payload["features"]["amountDeviation"]
        with pytest.raises(ValidationError):
            Transaction.model_validate(payload)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amountDeviation": -0.1},
            {"timeSinceLastTransaction": -1},
            {"amountDeviation": float("nan")},
            {"timeSinceLastTransaction": "soon"},
        ],
    )
    def test_invalid_feature_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            Transaction.model_validate(_camel_payload(**overrides))

    def test_non_positive_amount_rejected(self):
        payload = _camel_payload()
        payload["amount"] = 0
        with pytest.raises(ValidationError):
            Transaction.model_validate(payload)

    def test_unknown_transaction_type_rejected(self):
        payload = _camel_payload()
        payload["transactionType"] = "crypto"
        with pytest.raises(ValidationError):
            Transaction.model_validate(payload)

    def test_unknown_field_rejected(self):
        payload = _camel_payload()
        payload["features"]["velocity"] = 3
        with pytest.raises(ValidationError):
            Transaction.model_validate(payload)

    def test_frozen(self, transaction_factory):
        tx = transaction_factory()
        with pytest.raises(ValidationError):
            tx.amount = 1


class TestFeatures:
    def test_zero_values_valid(self):
        features = TransactionFeatures(
            time_since_last_transaction=0,
            amount_deviation=0,
            unusual_location=False,
            unusual_device=False,
            unusual_hour=False,
            first_time_receiver=False,
        )
        assert features.amount_deviation == 0.0


class TestSpamMessage:
    def test_empty_strings_valid(self):
        message = SpamMessage(sender="", message="")
        assert message.sender == ""


class TestFormatDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [(1500, "1500"), (1500.0, "1500"), (2.5, "2.5"), (0.1, "0.1"), (99.99, "99.99")],
    )
    def test_format(self, value, expected):
        assert format_decimal(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [(1e20, "100000000000000000000"), (1e21, "1e+21"), (2.5e22, "2.5e+22")],
    )
    def test_exponent_form_from_1e21(self, value, expected):
        assert format_decimal(value) == expected
