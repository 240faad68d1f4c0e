"""
PURPOSE: API router initialization and exports for GH Paylink.

Aggregates the payment, transaction and webhook routers into a single
api_router. The application mounts it at the root and again under /api for
frontends built against the /api/pay path.
"""

from fastapi import APIRouter

from paylink.api.routes_payments import router as payments_router
from paylink.api.routes_transactions import router as transactions_router
from paylink.api.routes_webhook import router as webhook_router

api_router = APIRouter()

api_router.include_router(payments_router)
api_router.include_router(transactions_router)
api_router.include_router(webhook_router)

__all__ = ["api_router"]
