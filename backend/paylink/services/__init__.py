"""
PURPOSE: Service layer for GH Paylink: storage and outbound gateway access.
"""

from paylink.services.gateway_client import GatewayClient, generate_tx_ref
from paylink.services.transaction_store import TransactionStore

__all__ = [
    "GatewayClient",
    "TransactionStore",
    "generate_tx_ref",
]
