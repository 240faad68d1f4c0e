from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import JSON, DateTime, Integer, Numeric, String, Text, func, Index
from sqlalchemy.orm import Mapped, mapped_column

from paylink.config.constants import MAX_TX_REF_LENGTH
from paylink.db.base import Base, TimestampMixin


class Transaction(Base, TimestampMixin):
    """Payment confirmed by a gateway webhook."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # The unique constraint is what makes concurrent duplicate deliveries safe
    tx_ref: Mapped[str] = mapped_column(
        String(MAX_TX_REF_LENGTH),
        unique=True,
        nullable=False,
        index=True
    )
    gateway_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    charged_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    currency: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    payment_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processor_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False
    )
    raw: Mapped[dict] = mapped_column(JSON, default=dict)

    __table_args__ = (
        Index("ix_transactions_created_at", "created_at"),
    )
