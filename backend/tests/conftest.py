"""
PURPOSE: Pytest fixtures for GH Paylink tests.

Provides shared test data and components including:
- Settings pointing at a per-test SQLite file database
- A TransactionStore with its schema created
- A FastAPI TestClient running the full application lifespan
- Sample Flutterwave webhook payloads
"""

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from paylink.config.settings import Settings
from paylink.db.engine import build_engine, build_session_factory, create_schema
from paylink.main import create_app
from paylink.services.gateway_client import GatewayClient
from paylink.services.transaction_store import TransactionStore

WEBHOOK_SECRET = "test-secret-hash"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """
    PURPOSE: Settings override with test values.

    Returns:
        Settings: Configuration with a throwaway SQLite database, rate
        limiting off and known gateway credentials.
    """
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'paylink.db'}",
        FLW_SECRET_KEY="FLWSECK_TEST-0000",
        FLW_SECRET_HASH=WEBHOOK_SECRET,
        FLW_BASE_URL="https://gateway.test/v3",
        FRONTEND_SUCCESS_URL="https://shop.test/success.html",
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def store(test_settings):
    """
    PURPOSE: TransactionStore over a fresh SQLite database.

    Returns:
        TransactionStore: Store whose tables already exist.
    """
    engine = build_engine(test_settings)
    await create_schema(engine)

    yield TransactionStore(build_session_factory(engine))

    await engine.dispose()


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


@pytest.fixture
def client(app):
    """
    PURPOSE: TestClient with the lifespan running, so the schema exists.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def gateway_stub(app, test_settings) -> Callable[[Callable[[httpx.Request], httpx.Response]], list]:
    """
    PURPOSE: Replace the app's gateway client with one backed by a handler.

    Returns:
        Callable: install(handler) -> list that collects the sent requests.
    """

    def install(handler: Callable[[httpx.Request], httpx.Response]) -> list:
        sent: list = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        app.state.gateway_client = GatewayClient(
            test_settings, transport=httpx.MockTransport(recording_handler)
        )
        return sent

    return install


def make_charge_payload(**overrides: Any) -> dict:
    """Build a Flutterwave v3 charge.completed webhook body."""
    data = {
        "id": 285959875,
        "tx_ref": "ghpaylink-1000",
        "flw_ref": "FLW-MOCK-1a2b3c",
        "amount": 50,
        "charged_amount": 50.7,
        "currency": "GHS",
        "status": "successful",
        "payment_type": "mobilemoneygh",
        "processor_response": "Approved",
        "created_at": "2026-10-01T10:15:00.000Z",
        "customer": {
            "id": 215604089,
            "name": "Ama",
            "email": "ama@example.com",
            "phone_number": "0241234567",
        },
    }
    data.update(overrides)
    return {"event": "charge.completed", "data": data}


@pytest.fixture
def charge_payload() -> dict:
    return make_charge_payload()


def as_body(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")
