"""SqlBalanceStore — account credits backed by the ``accounts`` table.

The debit is a single conditional UPDATE (compare-and-swap on the balance
value), so concurrent requests for one account cannot both land a debit
computed from the same stale read.
"""

from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from content_studio.core.exceptions import StoreError
from content_studio.db.models.account import Account
from content_studio.stores.base import DebitResult, DebitStatus

logger = structlog.get_logger(__name__)


class SqlBalanceStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def read(self, account_id: str) -> int | None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(select(Account.credits).where(Account.id == account_id))
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError("balance_read", str(exc)) from exc

    async def conditional_debit(self, account_id: str, amount: int, expected_balance: int) -> DebitResult:
        if amount < 0:
            raise ValueError("Debit amount must be non-negative")

        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(Account)
                    .where(
                        Account.id == account_id,
                        Account.credits == expected_balance,
                        Account.credits >= amount,
                    )
                    .values(
                        credits=Account.credits - amount,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                if result.rowcount == 1:
                    await session.commit()
                    return DebitResult(DebitStatus.OK, new_balance=expected_balance - amount)

                await session.rollback()
                exists = await session.execute(select(Account.id).where(Account.id == account_id))
                if exists.scalar_one_or_none() is None:
                    return DebitResult(DebitStatus.NOT_FOUND)
                return DebitResult(DebitStatus.CONFLICT)
        except SQLAlchemyError as exc:
            raise StoreError("balance_debit", str(exc)) from exc

    async def ensure_account(self, account_id: str, initial_credits: int) -> bool:
        """Create the account with ``initial_credits`` unless it already exists.

        Idempotent and race safe: a concurrent insert of the same id loses on
        the primary key and is treated as "already exists".

        Returns:
            True if this call created the account.
        """
        try:
            async with self.session_factory() as session:
                existing = await session.execute(select(Account.id).where(Account.id == account_id))
                if existing.scalar_one_or_none() is not None:
                    return False

                session.add(Account(id=account_id, credits=initial_credits))
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    return False
        except SQLAlchemyError as exc:
            raise StoreError("account_provision", str(exc)) from exc

        logger.info("account_provisioned", account_id=account_id, credits=initial_credits)
        return True
