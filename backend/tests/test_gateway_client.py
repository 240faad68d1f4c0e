"""
PURPOSE: Tests for the outbound Flutterwave payment-creation client.

The gateway is stubbed with httpx.MockTransport so the request the client
builds can be inspected.
"""

import json
from decimal import Decimal

import httpx
import pytest

from paylink.core.errors import GatewayCallError
from paylink.services.gateway_client import GatewayClient, generate_tx_ref

LINK_RESPONSE = {
    "status": "success",
    "message": "Hosted Link",
    "data": {"link": "https://checkout.flutterwave.test/v3/hosted/pay/abc123"},
}


def _client(settings, handler) -> tuple:
    sent = []

    def recording(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return handler(request)

    return GatewayClient(settings, transport=httpx.MockTransport(recording)), sent


class TestCreatePayment:
    """Test the request built and the response handling."""

    @pytest.mark.asyncio
    async def test_returns_full_gateway_response(self, test_settings):
        client, sent = _client(test_settings, lambda r: httpx.Response(200, json=LINK_RESPONSE))

        body = await client.create_payment("Ama", "ama@example.com", Decimal("50"), tx_ref="ghpaylink-1")

        assert body == LINK_RESPONSE
        request = sent[0]
        assert request.method == "POST"
        assert str(request.url) == "https://gateway.test/v3/payments"
        assert request.headers["Authorization"] == "Bearer FLWSECK_TEST-0000"

        payload = json.loads(request.content)
        assert payload["tx_ref"] == "ghpaylink-1"
        assert payload["amount"] == 50
        assert payload["currency"] == "GHS"
        assert payload["redirect_url"] == "https://shop.test/success.html"
        assert payload["customer"] == {"email": "ama@example.com", "name": "Ama"}
        assert payload["customizations"]["title"] == "GH Paylink"

    @pytest.mark.asyncio
    async def test_generates_reference(self, test_settings):
        client, sent = _client(test_settings, lambda r: httpx.Response(200, json=LINK_RESPONSE))
        await client.create_payment("Ama", "ama@example.com", Decimal("12.5"))

        payload = json.loads(sent[0].content)
        assert payload["tx_ref"].startswith("ghpaylink-")
        assert payload["amount"] == 12.5

    @pytest.mark.asyncio
    async def test_gateway_error_body_is_diagnostic(self, test_settings):
        error_body = {"status": "error", "message": "Invalid authorization key", "data": None}
        client, _ = _client(test_settings, lambda r: httpx.Response(401, json=error_body))

        with pytest.raises(GatewayCallError) as exc_info:
            await client.create_payment("Ama", "ama@example.com", Decimal("50"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == error_body

    @pytest.mark.asyncio
    async def test_transport_failure(self, test_settings):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = _client(test_settings, refuse)

        with pytest.raises(GatewayCallError) as exc_info:
            await client.create_payment("Ama", "ama@example.com", Decimal("50"))
        assert "connection refused" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_non_json_response(self, test_settings):
        client, _ = _client(test_settings, lambda r: httpx.Response(200, text="<html>maintenance</html>"))

        with pytest.raises(GatewayCallError):
            await client.create_payment("Ama", "ama@example.com", Decimal("50"))

    @pytest.mark.asyncio
    async def test_missing_secret_key_skips_call(self, test_settings):
        settings = test_settings.model_copy(update={"FLW_SECRET_KEY": ""})
        client, sent = _client(settings, lambda r: httpx.Response(200, json=LINK_RESPONSE))

        with pytest.raises(GatewayCallError):
            await client.create_payment("Ama", "ama@example.com", Decimal("50"))
        assert sent == []


def test_generate_tx_ref_uses_millis():
    assert generate_tx_ref(clock=lambda: 1700000000.123) == "ghpaylink-1700000000123"
