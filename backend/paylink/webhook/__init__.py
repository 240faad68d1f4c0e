"""
PURPOSE: Webhook module for GH Paylink: ingests Flutterwave payment notifications.

Verifies the shared-secret signature, normalizes the gateway's varying payload
shapes into a TransactionRecord, and stores successful payments idempotently.
"""

from paylink.webhook.ingestion import IngestionController, IngestionOutcome, IngestionResult
from paylink.webhook.normalizer import PayloadNormalizer
from paylink.webhook.signature import verify_signature

__all__ = [
    "IngestionController",
    "IngestionOutcome",
    "IngestionResult",
    "PayloadNormalizer",
    "verify_signature",
]
