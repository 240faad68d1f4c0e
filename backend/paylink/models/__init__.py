"""Database models for GH Paylink.

Import all models here so Alembic can detect them during migration generation.
"""

from paylink.models.transaction import Transaction

__all__ = [
    "Transaction",
]
