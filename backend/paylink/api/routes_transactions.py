"""
PURPOSE: Read-only listing of recorded transactions.

CALLED BY:
    - Frontend transactions page (GET, public)
"""

from typing import List

from fastapi import APIRouter, Depends, Request

from paylink.api.deps import get_transaction_store
from paylink.core.rate_limit import READ_LIMIT, limiter
from paylink.schemas.transaction import TransactionResponse
from paylink.services.transaction_store import TransactionStore

router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=List[TransactionResponse])
@limiter.limit(READ_LIMIT)
async def list_transactions(
    request: Request,
    store: TransactionStore = Depends(get_transaction_store),
) -> List[TransactionResponse]:
    """
    PURPOSE: Return every stored transaction, newest created_at first.

    Raises:
        HTTP 500: Storage unavailable (StorageError).
    """
    return await store.list_transactions()
