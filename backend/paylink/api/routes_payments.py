"""
PURPOSE: Payment initiation route for the GH Paylink frontend.

POST /pay takes {name, email, amount}, asks Flutterwave for a hosted
checkout and returns the gateway response verbatim; the frontend redirects
the customer to data.link. Nothing is persisted here: transactions are only
recorded once the gateway confirms them through the webhook.

CALLED BY:
    - Public frontend payment form (POST, public)
"""

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from paylink.core.errors import PaymentValidationError
from paylink.core.rate_limit import PAYMENT_LIMIT, limiter
from paylink.schemas.payment import PaymentRequest
from paylink.services.gateway_client import GatewayClient
from paylink.api.deps import get_gateway_client
from paylink.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])


@router.post("/pay")
@limiter.limit(PAYMENT_LIMIT)
async def initiate_payment(
    request: Request,
    gateway: GatewayClient = Depends(get_gateway_client),
) -> Dict[str, Any]:
    """
    PURPOSE: Create a hosted payment link for a customer.

    Args:
        request: FastAPI Request (JSON body {name, email, amount}).
        gateway: GatewayClient built at startup.

    Returns:
        dict: Full Flutterwave response; the checkout URL is at data.link.

    Raises:
        HTTP 400: Missing field or non-positive amount (PaymentValidationError).
        HTTP 429: Rate limit exceeded.
        HTTP 500: Gateway call failed (GatewayCallError), with diagnostic.
    """
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise PaymentValidationError()

    payment = PaymentRequest.from_body(body)
    logger.info("payment_requested", name=payment.name, amount=str(payment.amount))

    return await gateway.create_payment(payment.name, payment.email, payment.amount)
