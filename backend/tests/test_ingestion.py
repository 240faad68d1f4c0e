"""
PURPOSE: Tests for the webhook ingestion controller state machine.

Each test drives IngestionController.ingest with a raw body and checks the
terminal outcome, the response it selects, and what reached the store.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from paylink.config.constants import MAX_TX_REF_LENGTH, TransactionStatus
from paylink.services.transaction_store import TransactionStore
from paylink.webhook.ingestion import IngestionController, IngestionOutcome
from paylink.webhook.normalizer import PayloadNormalizer

from conftest import WEBHOOK_SECRET, as_body, make_charge_payload


@pytest.fixture
def controller(test_settings, store):
    return IngestionController(test_settings, PayloadNormalizer("GHS"), store)


class TestSignature:
    """Test rejection before any processing."""

    @pytest.mark.asyncio
    async def test_wrong_signature_rejected(self, controller, store, charge_payload):
        result = await controller.ingest("not-the-secret", as_body(charge_payload))

        assert result.outcome == IngestionOutcome.REJECTED
        assert result.status_code == 401
        assert result.message == "Invalid signature"
        assert await store.list_transactions() == []

    @pytest.mark.asyncio
    async def test_missing_signature_rejected(self, controller, charge_payload):
        result = await controller.ingest(None, as_body(charge_payload))
        assert result.status_code == 401

    @pytest.mark.asyncio
    async def test_body_not_parsed_when_rejected(self, controller):
        """Garbage bodies with a bad signature are rejected, not reported as defects."""
        result = await controller.ingest("nope", b"{not json")
        assert result.outcome == IngestionOutcome.REJECTED
        assert controller.defects == []

    @pytest.mark.asyncio
    async def test_unconfigured_secret_rejects_everything(self, test_settings, store, charge_payload):
        settings = test_settings.model_copy(update={"FLW_SECRET_HASH": ""})
        controller = IngestionController(settings, PayloadNormalizer(), store)

        result = await controller.ingest("", as_body(charge_payload))
        assert result.outcome == IngestionOutcome.REJECTED


class TestAcknowledged:
    """Test the persistence path."""

    @pytest.mark.asyncio
    async def test_successful_payment_stored(self, controller, store):
        payload = {
            "tx_ref": "ghpaylink-1000",
            "amount": 50,
            "currency": "GHS",
            "status": "successful",
            "customer": {"name": "Ama", "email": "ama@example.com"},
        }
        result = await controller.ingest(WEBHOOK_SECRET, as_body(payload))

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED
        assert result.status_code == 200
        assert result.created is True

        stored = await store.get_by_tx_ref("ghpaylink-1000")
        assert stored.status == TransactionStatus.SUCCESSFUL
        assert stored.amount == Decimal("50")
        assert stored.currency == "GHS"
        assert stored.id == result.transaction_id

    @pytest.mark.asyncio
    async def test_duplicate_delivery_acknowledged_once_stored(self, controller, store, charge_payload):
        first = await controller.ingest(WEBHOOK_SECRET, as_body(charge_payload))
        second = await controller.ingest(WEBHOOK_SECRET, as_body(charge_payload))

        assert first.created is True
        assert second.created is False
        assert second.status_code == 200
        assert second.outcome == IngestionOutcome.ACKNOWLEDGED
        assert second.transaction_id == first.transaction_id
        assert len(await store.list_transactions()) == 1


class TestNoOp:
    """Test verified payloads that are not successful payments."""

    @pytest.mark.asyncio
    async def test_pending_payment_not_stored(self, controller, store):
        payload = {"tx_ref": "ghpaylink-2000", "amount": 10, "status": "pending"}
        result = await controller.ingest(WEBHOOK_SECRET, as_body(payload))

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_NOOP
        assert result.status_code == 200
        assert result.message == "Webhook received (no action)"
        assert await store.list_transactions() == []


class TestDefect:
    """Test payloads acknowledged to the gateway but reported to operators."""

    @pytest.mark.asyncio
    async def test_missing_references(self, controller, store):
        payload = make_charge_payload()
        del payload["data"]["tx_ref"]
        del payload["data"]["flw_ref"]

        result = await controller.ingest(WEBHOOK_SECRET, as_body(payload))

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_DEFECT
        assert result.status_code == 200
        assert await store.list_transactions() == []

        defects = controller.defects
        assert len(defects) == 1
        assert defects[0].error_type == "MissingRequiredFieldError"
        assert defects[0].missing_fields == ["tx_ref"]

    @pytest.mark.asyncio
    async def test_invalid_json(self, controller):
        result = await controller.ingest(WEBHOOK_SECRET, b"{not json")

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_DEFECT
        assert result.status_code == 200
        assert controller.defects[0].error_type == "NormalizationError"

    @pytest.mark.asyncio
    async def test_non_object_json(self, controller):
        result = await controller.ingest(WEBHOOK_SECRET, b"[1, 2, 3]")
        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_DEFECT
        assert controller.defects[0].error_type == "MalformedPayloadError"

    @pytest.mark.asyncio
    async def test_reference_too_long_for_storage(self, controller, store):
        payload = make_charge_payload(tx_ref="r" * (MAX_TX_REF_LENGTH + 1))

        result = await controller.ingest(WEBHOOK_SECRET, as_body(payload))

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_DEFECT
        assert result.status_code == 200
        assert controller.defects[0].error_type == "MalformedPayloadError"
        assert await store.list_transactions() == []

    @pytest.mark.asyncio
    async def test_timestamp_overflow_still_stored(self, controller, store):
        payload = make_charge_payload(created_at="9999-12-31T23:00:00-05:00")

        result = await controller.ingest(WEBHOOK_SECRET, as_body(payload))

        assert result.outcome == IngestionOutcome.ACKNOWLEDGED
        assert result.status_code == 200
        assert len(await store.list_transactions()) == 1


class TestStorageFailure:
    """Test that storage faults are not acknowledged."""

    @pytest.mark.asyncio
    async def test_storage_error_returns_500(self, test_settings, charge_payload):
        controller = IngestionController(test_settings, PayloadNormalizer(), TransactionStore(None))
        result = await controller.ingest(WEBHOOK_SECRET, as_body(charge_payload))

        assert result.outcome == IngestionOutcome.FAILED
        assert result.status_code == 500
        assert result.message == "Server error"

    @pytest.mark.asyncio
    async def test_database_fault_on_commit_returns_500(self, controller, store, charge_payload, monkeypatch):
        async def failing_commit(self):
            raise OperationalError("INSERT INTO transactions", {}, Exception("database is locked"))

        monkeypatch.setattr(AsyncSession, "commit", failing_commit)

        result = await controller.ingest(WEBHOOK_SECRET, as_body(charge_payload))

        assert result.outcome == IngestionOutcome.FAILED
        assert result.status_code == 500
        assert result.message == "Server error"
        monkeypatch.undo()
        assert await store.list_transactions() == []

    @pytest.mark.asyncio
    async def test_noop_does_not_touch_storage(self, test_settings):
        controller = IngestionController(test_settings, PayloadNormalizer(), TransactionStore(None))
        result = await controller.ingest(WEBHOOK_SECRET, as_body({"status": "failed"}))
        assert result.outcome == IngestionOutcome.ACKNOWLEDGED_NOOP


class TestStatus:
    """Test the operator-facing counters."""

    @pytest.mark.asyncio
    async def test_outcome_counts(self, controller, charge_payload):
        await controller.ingest("bad", as_body(charge_payload))
        await controller.ingest(WEBHOOK_SECRET, as_body(charge_payload))
        await controller.ingest(WEBHOOK_SECRET, as_body({"status": "pending"}))

        status = controller.get_status()
        assert status.signature_configured is True
        assert status.outcomes["rejected"] == 1
        assert status.outcomes["acknowledged"] == 1
        assert status.outcomes["acknowledged_noop"] == 1
        assert status.outcomes["failed"] == 0
