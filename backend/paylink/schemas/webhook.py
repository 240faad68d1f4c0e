"""
Webhook ingestion status schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class DefectEntry(BaseModel):
    """A webhook payload that was acknowledged but could not be stored."""

    received_at: datetime
    reason: str
    error_type: str
    missing_fields: list[str] = Field(default_factory=list)
    tx_ref: Optional[str] = None


class WebhookStatus(BaseModel):
    """Ingestion counters and recent defects for operators."""

    signature_configured: bool
    outcomes: dict[str, int]
    recent_defects: list[DefectEntry]
