"""CreditLedgerEntry model — audit trail of debit attempts."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Uuid

from content_studio.db.base import Base

LEDGER_STATUS_DEBITED = "debited"
LEDGER_STATUS_DEBIT_FAILED = "debit_failed"


class CreditLedgerEntry(Base):
    __tablename__ = "credit_ledger"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(String(255), nullable=False, index=True)
    # No FK: the entry must outlive a deleted artifact
    artifact_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    cost = Column(Integer, nullable=False)
    balance_after = Column(Integer, nullable=True)  # None when the debit did not land
    status = Column(String(20), nullable=False, index=True)  # debited, debit_failed
    reason = Column(String(500), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
