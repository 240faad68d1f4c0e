"""
PURPOSE: Tests for request schemas and settings.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from paylink.config.settings import Settings
from paylink.core.errors import PaymentValidationError
from paylink.schemas.payment import PaymentRequest
from paylink.schemas.transaction import TransactionRecord


class TestPaymentRequest:
    """Test PaymentRequest.from_body validation."""

    def test_valid(self):
        request = PaymentRequest.from_body({"name": " Ama ", "email": "ama@example.com", "amount": "50"})
        assert request.name == "Ama"
        assert request.amount == Decimal("50")

    @pytest.mark.parametrize("missing", ["name", "email", "amount"])
    def test_missing_field(self, missing):
        body = {"name": "Ama", "email": "ama@example.com", "amount": 50}
        del body[missing]
        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentRequest.from_body(body)
        assert exc_info.value.message == "All fields are required"
        assert exc_info.value.detail == {"missing": [missing]}

    def test_empty_string_counts_as_missing(self):
        with pytest.raises(PaymentValidationError):
            PaymentRequest.from_body({"name": "", "email": "ama@example.com", "amount": 50})

    @pytest.mark.parametrize("amount", ["abc", 0, -5, True, "Infinity"])
    def test_invalid_amount(self, amount):
        with pytest.raises(PaymentValidationError) as exc_info:
            PaymentRequest.from_body({"name": "Ama", "email": "ama@example.com", "amount": amount})
        assert exc_info.value.status_code == 400

    def test_non_object_body(self):
        with pytest.raises(PaymentValidationError):
            PaymentRequest.from_body(["Ama"])


class TestTransactionRecordSerialization:
    """Test JSON output of monetary fields."""

    def test_amounts_serialize_as_numbers(self):
        record = TransactionRecord(
            tx_ref="a",
            amount=Decimal("50.00"),
            charged_amount=Decimal("50.70"),
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        dumped = record.model_dump(mode="json")
        assert dumped["amount"] == 50.0
        assert dumped["charged_amount"] == 50.7
        assert dumped["status"] == "unknown"
        assert dumped["currency"] == "GHS"


class TestSettings:
    """Test required-setting reporting."""

    def test_missing_required(self):
        settings = Settings(FLW_SECRET_KEY="", FLW_SECRET_HASH="", DATABASE_URL="  ")
        assert settings.get_missing_required() == ["FLW_SECRET_KEY", "FLW_SECRET_HASH", "DATABASE_URL"]
        assert settings.database_configured is False

    def test_all_present(self):
        settings = Settings(FLW_SECRET_KEY="k", FLW_SECRET_HASH="h", DATABASE_URL="sqlite+aiosqlite:///x.db")
        assert settings.get_missing_required() == []
        assert settings.database_configured is True

    def test_is_production(self):
        assert Settings(APP_ENV="Production").is_production() is True
        assert Settings(APP_ENV="development").is_production() is False
