"""Create the transactions table.

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    PURPOSE: Create the transactions table with its unique tx_ref constraint.
    """
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tx_ref", sa.String(length=100), nullable=False),
        sa.Column("gateway_ref", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("charged_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("currency", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("payment_type", sa.Text(), nullable=True),
        sa.Column("processor_response", sa.Text(), nullable=True),
        sa.Column("customer_id", sa.Text(), nullable=True),
        sa.Column("customer_name", sa.Text(), nullable=True),
        sa.Column("customer_email", sa.Text(), nullable=True),
        sa.Column("customer_phone", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("raw", sa.JSON(), nullable=True),
        sa.Column(
            "ingested_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transactions_tx_ref", "transactions", ["tx_ref"], unique=True)
    op.create_index("ix_transactions_created_at", "transactions", ["created_at"])


def downgrade() -> None:
    """
    PURPOSE: Drop the transactions table.
    """
    op.drop_index("ix_transactions_created_at", table_name="transactions")
    op.drop_index("ix_transactions_tx_ref", table_name="transactions")
    op.drop_table("transactions")
