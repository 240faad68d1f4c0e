"""
Transaction schemas for the GH Paylink API.

TransactionRecord is the canonical shape produced by the webhook normalizer
and persisted by the transaction store. TransactionResponse adds the storage
identity for the listing endpoint.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from paylink.config.constants import DEFAULT_CURRENCY, TransactionStatus

# Monetary values stay Decimal in Python and go out as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CustomerInfo(BaseModel):
    """Customer identity embedded in a transaction."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class TransactionRecord(BaseModel):
    """
    Canonical transaction record.

    Attributes:
        tx_ref: Merchant-generated reference, unique across records
        gateway_ref: Gateway-assigned reference (Flutterwave flw_ref)
        amount: Requested amount
        charged_amount: Amount actually settled, may include fees
        currency: Currency code
        status: Normalized outcome
        payment_type: Payment method reported by the gateway
        processor_response: Processor message reported by the gateway
        customer: Embedded customer identity
        created_at: Payload timestamp, or ingestion time when absent
        raw: Full original webhook body
    """

    tx_ref: str
    gateway_ref: Optional[str] = None
    amount: Money
    charged_amount: Money = Decimal("0")
    currency: str = DEFAULT_CURRENCY
    status: TransactionStatus = TransactionStatus.UNKNOWN
    payment_type: Optional[str] = None
    processor_response: Optional[str] = None
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    created_at: datetime
    raw: Any = None


class TransactionResponse(TransactionRecord):
    """Stored transaction as returned by GET /transactions."""

    id: int
    ingested_at: Optional[datetime] = None


class UpsertResult(BaseModel):
    """Outcome of TransactionStore.upsert."""

    created: bool
    id: int
