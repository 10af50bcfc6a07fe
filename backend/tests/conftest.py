"""Shared test fixtures: in-memory stores and a service factory.

The in-memory stores honour the same contracts as the SQL stores (atomic
conditional debit, owner-scoped delete, newest-first listing) and expose
failure switches for partial-failure tests.
"""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from content_studio.core.exceptions import StoreError
from content_studio.db.models.artifact import Artifact
from content_studio.domain.outcomes import GenerationRequest
from content_studio.providers.fake import FakeProvider
from content_studio.services.generation_service import GenerationService
from content_studio.stores.base import DebitResult, DebitStatus


class InMemoryBalanceStore:
    def __init__(self, balances: dict[str, int] | None = None):
        self.balances = dict(balances or {})
        self.fail_read = False
        self.fail_debit = False
        self.conflicts_to_inject = 0
        self.before_debit = None  # callable run at the start of every debit
        self.read_calls: list[str] = []
        self.debit_calls: list[tuple[str, int, int]] = []

    async def read(self, account_id):
        self.read_calls.append(account_id)
        await asyncio.sleep(0)
        if self.fail_read:
            raise StoreError("balance_read", "connection reset")
        return self.balances.get(account_id)

    async def conditional_debit(self, account_id, amount, expected_balance):
        self.debit_calls.append((account_id, amount, expected_balance))
        await asyncio.sleep(0)
        if self.before_debit is not None:
            self.before_debit()
        if self.fail_debit:
            raise StoreError("balance_debit", "connection reset")
        if account_id not in self.balances:
            return DebitResult(DebitStatus.NOT_FOUND)
        if self.conflicts_to_inject > 0:
            self.conflicts_to_inject -= 1
            return DebitResult(DebitStatus.CONFLICT)

        current = self.balances[account_id]
        if current != expected_balance or current < amount:
            return DebitResult(DebitStatus.CONFLICT)
        self.balances[account_id] = current - amount
        return DebitResult(DebitStatus.OK, new_balance=current - amount)


class InMemoryArtifactStore:
    def __init__(self):
        self.artifacts: dict[uuid.UUID, Artifact] = {}
        self.fail_insert = False
        self.fail_delete = False
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    async def insert(self, owner_id, content_type, topic, body, cost, metadata):
        await asyncio.sleep(0)
        if self.fail_insert:
            raise StoreError("artifact_insert", "disk full")
        self._clock += timedelta(seconds=1)
        artifact = Artifact(
            id=uuid.uuid4(),
            owner_id=owner_id,
            content_type=content_type,
            topic=topic,
            body=body,
            cost=cost,
            generation_metadata=dict(metadata),
            created_at=self._clock,
        )
        self.artifacts[artifact.id] = artifact
        return artifact

    async def list_by_owner(self, account_id):
        owned = [a for a in self.artifacts.values() if a.owner_id == account_id]
        return sorted(owned, key=lambda a: a.created_at, reverse=True)

    async def delete_by_id_and_owner(self, artifact_id, account_id):
        await asyncio.sleep(0)
        if self.fail_delete:
            raise StoreError("artifact_delete", "connection reset")
        artifact = self.artifacts.get(artifact_id)
        if artifact is None or artifact.owner_id != account_id:
            return False
        del self.artifacts[artifact_id]
        return True

    def owned_by(self, account_id):
        return [a for a in self.artifacts.values() if a.owner_id == account_id]


class RecordingLedger:
    def __init__(self):
        self.entries: list[dict] = []
        self.fail = False

    async def record(self, account_id, artifact_id, cost, status, balance_after=None, reason=None):
        if self.fail:
            raise StoreError("ledger_write", "table locked")
        self.entries.append(
            {
                "account_id": account_id,
                "artifact_id": artifact_id,
                "cost": cost,
                "status": status,
                "balance_after": balance_after,
                "reason": reason,
            }
        )


@pytest.fixture
def balance_store():
    """Balances: alice 10, bob 2, broke 0."""
    return InMemoryBalanceStore({"user_alice": 10, "user_bob": 2, "user_broke": 0})


@pytest.fixture
def artifact_store():
    return InMemoryArtifactStore()


@pytest.fixture
def ledger():
    return RecordingLedger()


@pytest.fixture
def provider():
    """FakeProvider in happy_path scenario."""
    return FakeProvider(scenario="happy_path")


@pytest.fixture
def make_service(balance_store, artifact_store, ledger, provider):
    """Factory for GenerationService over the in-memory fixtures; kwargs override collaborators."""

    def _make(**overrides) -> GenerationService:
        kwargs = {
            "balance_store": balance_store,
            "artifact_store": artifact_store,
            "provider": provider,
            "ledger": ledger,
            "provider_timeout_seconds": 1.0,
            "max_debit_attempts": 5,
        }
        kwargs.update(overrides)
        return GenerationService(**kwargs)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def blog_request():
    """A valid medium-length request (cost 2)."""
    return GenerationRequest(
        content_type="blog-post",
        topic="Remote work productivity",
        tone="professional",
        length="medium",
    )
