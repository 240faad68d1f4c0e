"""
PURPOSE: Constants shared across the GH Paylink relay.

Transaction status values, gateway header names and reference prefixes.
"""

from decimal import Decimal
from enum import Enum


class TransactionStatus(str, Enum):
    """Normalized outcome of a gateway transaction."""

    PENDING = "pending"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    UNKNOWN = "unknown"


# Header Flutterwave attaches to webhook deliveries
SIGNATURE_HEADER = "verif-hash"

# Prefix for merchant-generated transaction references
TX_REF_PREFIX = "ghpaylink-"

# Prefix for references synthesized from the gateway reference
SYNTHETIC_REF_PREFIX = "ref-"

DEFAULT_CURRENCY = "GHS"

# Checkout page branding sent with every payment request
CHECKOUT_TITLE = "GH Paylink"
CHECKOUT_DESCRIPTION = "Payment via GH Paylink"

# Storage bounds: transactions.tx_ref is VARCHAR(100), amounts are NUMERIC(14, 2)
MAX_TX_REF_LENGTH = 100
MAX_AMOUNT = Decimal("999999999999.99")
