"""
PURPOSE: Outbound client for the Flutterwave payment-creation endpoint.

Creates a hosted checkout for a customer and returns the gateway's response,
which carries the checkout URL at data.link. One attempt per call; failures
surface immediately as GatewayCallError.

CALLED BY:
    - paylink/api/routes_payments.py (POST /pay)
"""

import time
from decimal import Decimal
from typing import Any, Callable, Optional

import httpx

from paylink.config.constants import CHECKOUT_DESCRIPTION, CHECKOUT_TITLE, TX_REF_PREFIX
from paylink.config.settings import Settings
from paylink.core.errors import GatewayCallError
from paylink.utils.logger import get_logger

logger = get_logger(__name__)


def generate_tx_ref(clock: Callable[[], float] = time.time) -> str:
    """Return a merchant reference of the form ghpaylink-<epoch millis>."""
    return f"{TX_REF_PREFIX}{int(clock() * 1000)}"


def _json_amount(amount: Decimal) -> Any:
    return int(amount) if amount == amount.to_integral_value() else float(amount)


class GatewayClient:
    """
    PURPOSE: Thin async wrapper around POST {FLW_BASE_URL}/payments.

    Attributes:
        settings:  Application settings (secret key, base URL, redirect URL,
                   currency and timeout).
        transport: Optional httpx transport, used by tests to stub the gateway.
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.transport = transport

    def build_payload(self, name: str, email: str, amount: Decimal, tx_ref: str) -> dict[str, Any]:
        """Build the payment-creation request body."""
        return {
            "tx_ref": tx_ref,
            "amount": _json_amount(amount),
            "currency": self.settings.DEFAULT_CURRENCY,
            "redirect_url": self.settings.FRONTEND_SUCCESS_URL,
            "customer": {"email": email, "name": name},
            "customizations": {
                "title": CHECKOUT_TITLE,
                "description": CHECKOUT_DESCRIPTION,
            },
        }

    @staticmethod
    def _error_detail(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

    async def create_payment(
        self,
        name: str,
        email: str,
        amount: Decimal,
        tx_ref: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        PURPOSE: Ask the gateway for a hosted payment link.

        Args:
            name:   Customer name.
            email:  Customer email.
            amount: Amount in the default currency.
            tx_ref: Merchant reference; generated when omitted.

        Returns:
            dict: The gateway's full JSON response.

        Raises:
            GatewayCallError: Secret key missing, transport failure, non-2xx
                status, or a body that is not JSON.
        """
        secret_key = self.settings.FLW_SECRET_KEY.strip()
        if not secret_key:
            logger.error("gateway_secret_missing")
            raise GatewayCallError(detail="Gateway secret key is not configured")

        tx_ref = tx_ref or generate_tx_ref()
        url = f"{self.settings.FLW_BASE_URL.rstrip('/')}/payments"
        headers = {
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(name, email, amount, tx_ref)

        logger.info("payment_initiation_started", tx_ref=tx_ref, amount=str(amount))

        client_kwargs: dict[str, Any] = {"timeout": self.settings.GATEWAY_TIMEOUT_SECONDS}
        if self.transport is not None:
            client_kwargs["transport"] = self.transport

        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            detail = str(e) or type(e).__name__
            logger.error("payment_initiation_failed", tx_ref=tx_ref, error=detail)
            raise GatewayCallError(detail=detail) from e

        if response.is_error:
            detail = self._error_detail(response)
            logger.error(
                "payment_initiation_rejected",
                tx_ref=tx_ref,
                status_code=response.status_code,
                error=detail,
            )
            raise GatewayCallError(detail=detail)

        try:
            body = response.json()
        except ValueError as e:
            logger.error("payment_initiation_bad_response", tx_ref=tx_ref, status_code=response.status_code)
            raise GatewayCallError(detail="Gateway returned a non-JSON response") from e

        if not isinstance(body, dict):
            logger.error("payment_initiation_bad_response", tx_ref=tx_ref, status_code=response.status_code)
            raise GatewayCallError(detail="Gateway returned an unexpected response")

        data = body.get("data")
        logger.info(
            "payment_initiation_succeeded",
            tx_ref=tx_ref,
            has_link=bool(isinstance(data, dict) and data.get("link")),
        )
        return body
