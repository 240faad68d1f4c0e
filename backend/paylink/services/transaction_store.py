"""
Transaction store for GH Paylink.

PURPOSE: Persist canonical transaction records with at most one row per
tx_ref, and list them newest first.

Duplicate protection rests on the unique constraint on transactions.tx_ref:
two concurrent deliveries of the same payment both try to insert, the
database lets exactly one commit, and the loser's IntegrityError is turned
into a "not created" result. The lookup before the insert only avoids the
failed INSERT on the common redelivery path.

CALLED BY: IngestionController, GET /transactions
"""

from typing import Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paylink.core.errors import StorageError
from paylink.models.transaction import Transaction
from paylink.schemas.transaction import (
    CustomerInfo,
    TransactionRecord,
    TransactionResponse,
    UpsertResult,
)
from paylink.utils.logger import get_logger


logger = get_logger("services.transaction_store")


def _to_row(record: TransactionRecord) -> Transaction:
    return Transaction(
        tx_ref=record.tx_ref,
        gateway_ref=record.gateway_ref,
        amount=record.amount,
        charged_amount=record.charged_amount,
        currency=record.currency,
        status=record.status.value,
        payment_type=record.payment_type,
        processor_response=record.processor_response,
        customer_id=record.customer.id,
        customer_name=record.customer.name,
        customer_email=record.customer.email,
        customer_phone=record.customer.phone,
        created_at=record.created_at,
        raw=record.raw,
    )


def _to_response(row: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=row.id,
        tx_ref=row.tx_ref,
        gateway_ref=row.gateway_ref,
        amount=row.amount,
        charged_amount=row.charged_amount,
        currency=row.currency,
        status=row.status,
        payment_type=row.payment_type,
        processor_response=row.processor_response,
        customer=CustomerInfo(
            id=row.customer_id,
            name=row.customer_name,
            email=row.customer_email,
            phone=row.customer_phone,
        ),
        created_at=row.created_at,
        raw=row.raw,
        ingested_at=row.ingested_at,
    )


class TransactionStore:
    """
    Repository for Transaction rows.

    PURPOSE: Provide idempotent writes and ordered reads over the
    transactions table.

    Args:
        session_factory: Async session factory, or None when no database is
            configured; every operation then raises StorageError.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker[AsyncSession]]) -> None:
        self._session_factory = session_factory

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            raise StorageError("Storage is not configured")
        return self._session_factory

    @staticmethod
    async def _find_id(db: AsyncSession, tx_ref: str) -> Optional[int]:
        result = await db.execute(select(Transaction.id).where(Transaction.tx_ref == tx_ref))
        return result.scalar_one_or_none()

    async def upsert(self, record: TransactionRecord) -> UpsertResult:
        """
        Store a record unless one with the same tx_ref already exists.

        First write wins: an existing row is never modified.

        Args:
            record: Canonical record from the normalizer

        Returns:
            UpsertResult: created=True with the new id, or created=False with
            the id of the row already holding this tx_ref

        Raises:
            StorageError: If the database is unavailable or the write fails
        """
        sessions = self._sessions()
        try:
            async with sessions() as db:
                existing_id = await self._find_id(db, record.tx_ref)
                if existing_id is not None:
                    logger.info("transaction_duplicate_ignored", tx_ref=record.tx_ref, id=existing_id)
                    return UpsertResult(created=False, id=existing_id)

                row = _to_row(record)
                db.add(row)
                try:
                    await db.commit()
                except IntegrityError:
                    # Lost the insert race to a concurrent delivery
                    await db.rollback()
                    winner_id = await self._find_id(db, record.tx_ref)
                    if winner_id is None:
                        raise
                    logger.info("transaction_duplicate_race", tx_ref=record.tx_ref, id=winner_id)
                    return UpsertResult(created=False, id=winner_id)

                logger.info(
                    "transaction_saved",
                    id=row.id,
                    tx_ref=record.tx_ref,
                    amount=str(record.amount),
                    currency=record.currency,
                )
                return UpsertResult(created=True, id=row.id)

        except (SQLAlchemyError, OSError) as e:
            logger.error("transaction_upsert_error", tx_ref=record.tx_ref, error=str(e))
            raise StorageError("Failed to store transaction") from e

    async def get_by_tx_ref(self, tx_ref: str) -> Optional[TransactionResponse]:
        """
        Retrieve a stored transaction by merchant reference.

        Returns:
            TransactionResponse if found, None otherwise
        """
        sessions = self._sessions()
        try:
            async with sessions() as db:
                result = await db.execute(select(Transaction).where(Transaction.tx_ref == tx_ref))
                row = result.scalar_one_or_none()
                return _to_response(row) if row is not None else None
        except (SQLAlchemyError, OSError) as e:
            logger.error("transaction_lookup_error", tx_ref=tx_ref, error=str(e))
            raise StorageError("Failed to read transaction") from e

    async def list_transactions(self) -> list[TransactionResponse]:
        """
        List all stored transactions, newest created_at first.

        Raises:
            StorageError: If the database is unavailable
        """
        sessions = self._sessions()
        try:
            async with sessions() as db:
                stmt = select(Transaction).order_by(desc(Transaction.created_at), desc(Transaction.id))
                result = await db.execute(stmt)
                rows = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            logger.error("transaction_list_error", error=str(e))
            raise StorageError("Failed to list transactions") from e

        logger.debug("transactions_listed", count=len(rows))
        return [_to_response(row) for row in rows]
