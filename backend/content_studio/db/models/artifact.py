"""Artifact model — one persisted generation result."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from content_studio.db.base import Base


class Artifact(Base):
    """Generated content owned by exactly one account.

    Rows are inserted once by the generation transaction and only ever
    deleted afterwards; ``cost`` is what was charged at creation time.
    """

    __tablename__ = "artifacts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(String(255), ForeignKey("accounts.id"), nullable=False, index=True)

    content_type = Column(String(100), nullable=False)
    topic = Column(Text, nullable=False)
    body = Column(Text, nullable=False)
    cost = Column(Integer, nullable=False)

    # {"tone": ..., "length": ..., "additional_context": ...}
    # "metadata" is reserved on declarative classes, hence the attribute name
    generation_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )
