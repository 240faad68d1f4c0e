"""
PURPOSE: Export configuration settings and constants for GH Paylink.
"""

from .constants import (
    CHECKOUT_DESCRIPTION,
    CHECKOUT_TITLE,
    DEFAULT_CURRENCY,
    MAX_AMOUNT,
    MAX_TX_REF_LENGTH,
    SIGNATURE_HEADER,
    SYNTHETIC_REF_PREFIX,
    TX_REF_PREFIX,
    TransactionStatus,
)
from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "TransactionStatus",
    "SIGNATURE_HEADER",
    "TX_REF_PREFIX",
    "SYNTHETIC_REF_PREFIX",
    "DEFAULT_CURRENCY",
    "MAX_TX_REF_LENGTH",
    "MAX_AMOUNT",
    "CHECKOUT_TITLE",
    "CHECKOUT_DESCRIPTION",
]
