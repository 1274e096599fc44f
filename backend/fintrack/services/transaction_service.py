"""Transaction management service."""

from datetime import datetime, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.exceptions import StoreError
from fintrack.models.transaction import Transaction
from fintrack.models.user import User
from fintrack.schemas.transaction import TransactionCreate
from fintrack.services.aggregation import Aggregation, TimeRange, aggregate, compute_cutoff

logger = structlog.get_logger()


class TransactionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_transactions(
        self,
        user: User,
        time_range: TimeRange | str | None = None,
        now: datetime | None = None,
    ) -> list[Transaction]:
        """List the user's transactions on or after the range cutoff, newest first."""
        now = now or datetime.now(timezone.utc)
        selector = TimeRange.parse(time_range)

        query = select(Transaction).where(Transaction.owner_id == user.id)
        if selector is not TimeRange.ALL:
            query = query.where(Transaction.date >= compute_cutoff(selector, now))
        query = query.order_by(Transaction.date.desc(), Transaction.id.desc())

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.exception("Failed to fetch transactions", user_id=user.id)
            raise StoreError("Failed to fetch transactions") from e
        return list(result.scalars().all())

    async def create_transaction(self, data: TransactionCreate, user: User) -> Transaction:
        """Create a transaction owned by ``user``."""
        txn = Transaction(
            owner_id=user.id,
            date=data.date,
            description=data.description,
            amount=data.amount,
            category=data.category,
        )
        try:
            self.db.add(txn)
            await self.db.flush()
            await self.db.refresh(txn)
        except SQLAlchemyError as e:
            logger.exception("Failed to add transaction", user_id=user.id)
            raise StoreError("Failed to add transaction") from e

        logger.info("Transaction created", user_id=user.id, transaction_id=txn.id)
        return txn

    async def summarize(
        self,
        user: User,
        time_range: TimeRange | str | None = None,
        now: datetime | None = None,
    ) -> Aggregation:
        """Daily buckets and totals over the same window ``list_transactions`` uses."""
        now = now or datetime.now(timezone.utc)
        transactions = await self.list_transactions(user, time_range, now)
        return aggregate(transactions, time_range, now)
