"""Account model — a user's spendable credit balance."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from content_studio.db.base import Base


class Account(Base):
    __tablename__ = "accounts"

    # Verified auth subject (Clerk user id)
    id = Column(String(255), primary_key=True)
    credits = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("credits >= 0", name="ck_accounts_credits_non_negative"),)
