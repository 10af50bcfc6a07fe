"""SqlCreditLedger — append-only audit rows for debit attempts."""

from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from content_studio.core.exceptions import StoreError
from content_studio.db.models.credit_ledger import CreditLedgerEntry


class SqlCreditLedger:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record(
        self,
        account_id: str,
        artifact_id: UUID,
        cost: int,
        status: str,
        balance_after: int | None = None,
        reason: str | None = None,
    ) -> None:
        entry = CreditLedgerEntry(
            account_id=account_id,
            artifact_id=artifact_id,
            cost=cost,
            status=status,
            balance_after=balance_after,
            reason=reason[:500] if reason else None,
        )
        try:
            async with self.session_factory() as session:
                session.add(entry)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError("ledger_write", str(exc)) from exc
