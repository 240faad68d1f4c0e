"""
PURPOSE: FastAPI dependencies exposing the components built by create_app().

Components live on app.state so request handlers never reach for
module-level globals.
"""

from fastapi import Request

from paylink.services.gateway_client import GatewayClient
from paylink.services.transaction_store import TransactionStore
from paylink.webhook.ingestion import IngestionController


def get_transaction_store(request: Request) -> TransactionStore:
    return request.app.state.transaction_store


def get_gateway_client(request: Request) -> GatewayClient:
    return request.app.state.gateway_client


def get_ingestion_controller(request: Request) -> IngestionController:
    return request.app.state.ingestion_controller
