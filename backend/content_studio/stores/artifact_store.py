"""SqlArtifactStore — generated content rows, always scoped by owner."""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from content_studio.core.exceptions import StoreError
from content_studio.db.models.artifact import Artifact


class SqlArtifactStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def insert(
        self,
        owner_id: str,
        content_type: str,
        topic: str,
        body: str,
        cost: int,
        metadata: dict[str, Any],
    ) -> Artifact:
        artifact = Artifact(
            owner_id=owner_id,
            content_type=content_type,
            topic=topic,
            body=body,
            cost=cost,
            generation_metadata=metadata,
        )
        try:
            async with self.session_factory() as session:
                session.add(artifact)
                await session.commit()
                await session.refresh(artifact)
        except SQLAlchemyError as exc:
            raise StoreError("artifact_insert", str(exc)) from exc
        return artifact

    async def list_by_owner(self, account_id: str) -> list[Artifact]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Artifact)
                    .where(Artifact.owner_id == account_id)
                    .order_by(Artifact.created_at.desc(), Artifact.id.desc())
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise StoreError("artifact_list", str(exc)) from exc

    async def delete_by_id_and_owner(self, artifact_id: UUID, account_id: str) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(Artifact).where(
                        Artifact.id == artifact_id,
                        Artifact.owner_id == account_id,
                    )
                )
                await session.commit()
                return result.rowcount == 1
        except SQLAlchemyError as exc:
            raise StoreError("artifact_delete", str(exc)) from exc
