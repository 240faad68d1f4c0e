"""
PURPOSE: Pydantic schemas for the GH Paylink API.
"""

from paylink.schemas.payment import PaymentRequest
from paylink.schemas.transaction import (
    CustomerInfo,
    TransactionRecord,
    TransactionResponse,
    UpsertResult,
)
from paylink.schemas.webhook import DefectEntry, WebhookStatus

__all__ = [
    "PaymentRequest",
    "CustomerInfo",
    "TransactionRecord",
    "TransactionResponse",
    "UpsertResult",
    "DefectEntry",
    "WebhookStatus",
]
