"""
PURPOSE: Flutterwave webhook routes for GH Paylink.

POST /webhook is PUBLIC: Flutterwave cannot authenticate any other way than
by echoing the merchant's secret hash in the verif-hash header. The raw body
is handed to the IngestionController, which owns the verify → normalize →
store sequence and picks the response.

Responses are plain text and never carry error details back to the gateway:
    401 Invalid signature
    200 Webhook received / Webhook received (no action)
    500 Server error (storage fault only, so the gateway redelivers)

POST /webhook is not rate limited: Flutterwave delivers from a few shared
addresses, and a 429 would count as a failed delivery. The signature check
is the only gate.

CALLED BY:
    - Flutterwave webhook delivery (POST, public)
    - Operators (GET /webhook/status)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from paylink.api.deps import get_ingestion_controller
from paylink.config.constants import SIGNATURE_HEADER
from paylink.core.rate_limit import READ_LIMIT, limiter
from paylink.schemas.webhook import WebhookStatus
from paylink.webhook.ingestion import IngestionController

router = APIRouter(prefix="/webhook", tags=["webhook"])


@router.post("", response_class=PlainTextResponse)
async def receive_webhook(
    request: Request,
    verif_hash: Optional[str] = Header(None, alias=SIGNATURE_HEADER),
    controller: IngestionController = Depends(get_ingestion_controller),
) -> PlainTextResponse:
    """
    PURPOSE: Receive a Flutterwave payment notification.

    Args:
        request:    FastAPI Request; the raw body is read unparsed.
        verif_hash: Value of the verif-hash header (optional).
        controller: IngestionController built at startup.

    Returns:
        PlainTextResponse: Status and text chosen by the controller.
    """
    body = await request.body()
    result = await controller.ingest(verif_hash, body)
    return PlainTextResponse(result.message, status_code=result.status_code)


@router.get("/status", response_model=WebhookStatus)
@limiter.limit(READ_LIMIT)
async def webhook_status(
    request: Request,
    controller: IngestionController = Depends(get_ingestion_controller),
) -> WebhookStatus:
    """
    PURPOSE: Report ingestion counters and payloads acknowledged as defects.

    Defect entries carry the reason, missing fields and tx_ref only, never
    the raw payload.
    """
    return controller.get_status()
