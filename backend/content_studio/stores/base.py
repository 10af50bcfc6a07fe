"""Store protocols used by the generation transaction.

Both stores raise ``StoreError`` for infrastructure failures; absence and
compare-and-swap conflicts are ordinary return values.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from content_studio.db.models.artifact import Artifact


class DebitStatus(StrEnum):
    OK = "ok"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class DebitResult:
    status: DebitStatus
    new_balance: int | None = None


@runtime_checkable
class BalanceStore(Protocol):
    async def read(self, account_id: str) -> int | None:
        """Return the account's credits, or None if the account does not exist."""
        ...

    async def conditional_debit(self, account_id: str, amount: int, expected_balance: int) -> DebitResult:
        """Atomically set credits to ``expected_balance - amount`` iff credits still equal ``expected_balance``."""
        ...


@runtime_checkable
class ArtifactStore(Protocol):
    async def insert(
        self,
        owner_id: str,
        content_type: str,
        topic: str,
        body: str,
        cost: int,
        metadata: dict[str, Any],
    ) -> Artifact:
        ...

    async def list_by_owner(self, account_id: str) -> list[Artifact]:
        """Return every artifact owned by ``account_id``, newest first."""
        ...

    async def delete_by_id_and_owner(self, artifact_id: UUID, account_id: str) -> bool:
        """Delete iff the artifact exists and is owned by ``account_id``."""
        ...


@runtime_checkable
class CreditLedger(Protocol):
    async def record(
        self,
        account_id: str,
        artifact_id: UUID,
        cost: int,
        status: str,
        balance_after: int | None = None,
        reason: str | None = None,
    ) -> None:
        ...
