"""
PURPOSE: Flutterwave webhook ingestion controller for GH Paylink.

Runs one inbound webhook delivery through signature check, normalization and
idempotent storage, and decides the response. Every delivery ends in exactly
one IngestionOutcome:

    REJECTED             401  signature missing or wrong; body never parsed
    ACKNOWLEDGED_NOOP    200  verified, but not a successful payment
    ACKNOWLEDGED_DEFECT  200  successful payment that could not be normalized;
                              reported on the defect log so the gateway stops
                              redelivering and an operator can follow up
    ACKNOWLEDGED         200  stored, or already stored by an earlier delivery
    FAILED               500  storage fault; the gateway's redelivery is the
                              only recovery path

CALLED BY:
    - paylink/api/routes_webhook.py (POST /webhook)
"""

import json
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque, Dict, Optional

from paylink.config.settings import Settings
from paylink.core.errors import (
    MissingRequiredFieldError,
    NormalizationError,
    SignatureError,
    StorageError,
)
from paylink.schemas.webhook import DefectEntry, WebhookStatus
from paylink.services.transaction_store import TransactionStore
from paylink.utils.logger import get_logger
from paylink.webhook.normalizer import PayloadNormalizer
from paylink.webhook.signature import verify_signature

logger = get_logger(__name__)

# Maximum number of defects retained for the status endpoint
MAX_DEFECT_HISTORY = 50


class IngestionOutcome(str, Enum):
    REJECTED = "rejected"
    ACKNOWLEDGED_NOOP = "acknowledged_noop"
    ACKNOWLEDGED_DEFECT = "acknowledged_defect"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"


@dataclass(frozen=True)
class IngestionResult:
    """Terminal state of one webhook delivery and the response to send."""

    outcome: IngestionOutcome
    status_code: int
    message: str
    transaction_id: Optional[int] = None
    created: bool = False


class IngestionController:
    """
    PURPOSE: Orchestrate verifier, normalizer and store for each webhook call.

    Attributes:
        settings:   Application settings; FLW_SECRET_HASH is the webhook secret.
        normalizer: PayloadNormalizer producing canonical records.
        store:      TransactionStore receiving successful payments.
        _defects:   Deque of the last MAX_DEFECT_HISTORY defects, newest first.
        _counts:    Deliveries seen per outcome since start.
    """

    def __init__(
        self,
        settings: Settings,
        normalizer: PayloadNormalizer,
        store: TransactionStore,
    ) -> None:
        self.settings = settings
        self.normalizer = normalizer
        self.store = store
        self._defects: Deque[DefectEntry] = deque(maxlen=MAX_DEFECT_HISTORY)
        self._counts: Dict[str, int] = {outcome.value: 0 for outcome in IngestionOutcome}

    # ════════════════════════════════════════════════════════════════
    # Public API
    # ════════════════════════════════════════════════════════════════

    async def ingest(self, signature: Optional[str], body: bytes) -> IngestionResult:
        """
        PURPOSE: Process one webhook delivery end to end.

        Args:
            signature: Value of the verif-hash header, if present.
            body:      Raw request body.

        Returns:
            IngestionResult: Outcome plus the status code and text to return.
        """
        # 1. Signature check happens before the body is even decoded
        try:
            self._authenticate(signature)
        except SignatureError as e:
            return self._finish(IngestionOutcome.REJECTED, e.status_code, e.message)

        # 2. Decode and normalize
        received_at = datetime.now(timezone.utc)
        try:
            payload = self._decode(body)
            record = self.normalizer.normalize(payload, now=received_at)
        except NormalizationError as e:
            self._report_defect(e, received_at)
            return self._finish(IngestionOutcome.ACKNOWLEDGED_DEFECT, 200, "Webhook received")

        if record is None:
            logger.info(
                "webhook_no_action",
                event_type=self.normalizer.event_type(payload),
            )
            return self._finish(IngestionOutcome.ACKNOWLEDGED_NOOP, 200, "Webhook received (no action)")

        # 3. Idempotent store
        try:
            result = await self.store.upsert(record)
        except StorageError as e:
            logger.error("webhook_storage_failed", tx_ref=record.tx_ref, error=str(e))
            return self._finish(IngestionOutcome.FAILED, 500, "Server error")

        logger.info(
            "webhook_transaction_recorded",
            tx_ref=record.tx_ref,
            transaction_id=result.id,
            created=result.created,
        )
        return self._finish(
            IngestionOutcome.ACKNOWLEDGED,
            200,
            "Webhook received",
            transaction_id=result.id,
            created=result.created,
        )

    def get_status(self) -> WebhookStatus:
        """
        PURPOSE: Return ingestion counters and recent defects.

        CALLED BY: GET /webhook/status
        """
        return WebhookStatus(
            signature_configured=bool(self.settings.FLW_SECRET_HASH),
            outcomes=dict(self._counts),
            recent_defects=list(self._defects),
        )

    @property
    def defects(self) -> list[DefectEntry]:
        return list(self._defects)

    # ════════════════════════════════════════════════════════════════
    # Internal Helpers
    # ════════════════════════════════════════════════════════════════

    def _authenticate(self, signature: Optional[str]) -> None:
        if not verify_signature(signature, self.settings.FLW_SECRET_HASH):
            logger.warning(
                "webhook_signature_invalid",
                signature_present=bool(signature),
                secret_configured=bool(self.settings.FLW_SECRET_HASH),
            )
            raise SignatureError()

    @staticmethod
    def _decode(body: bytes) -> Any:
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise NormalizationError("Webhook body is not valid JSON") from e

    def _report_defect(self, error: NormalizationError, received_at: datetime) -> None:
        missing: list[str] = []
        tx_ref = None
        if isinstance(error, MissingRequiredFieldError):
            missing = error.fields
            tx_ref = error.tx_ref
        entry = DefectEntry(
            received_at=received_at,
            reason=error.message,
            error_type=type(error).__name__,
            missing_fields=missing,
            tx_ref=tx_ref,
        )
        self._defects.appendleft(entry)
        logger.error(
            "webhook_payload_defect",
            reason=error.message,
            error_type=entry.error_type,
            missing_fields=missing,
            tx_ref=tx_ref,
        )

    def _finish(
        self,
        outcome: IngestionOutcome,
        status_code: int,
        message: str,
        transaction_id: Optional[int] = None,
        created: bool = False,
    ) -> IngestionResult:
        self._counts[outcome.value] += 1
        return IngestionResult(
            outcome=outcome,
            status_code=status_code,
            message=message,
            transaction_id=transaction_id,
            created=created,
        )
