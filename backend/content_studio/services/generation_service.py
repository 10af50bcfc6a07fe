"""GenerationService: the credit-metered generation transaction plus artifact listing/deletion.

Transaction order (first failure wins, nothing written before step 5):
1. identity present                       -> MissingIdentity
2. required request fields present        -> InvalidRequest
3. account exists (balance read)          -> UnknownAccount
4. cost(length) <= balance                -> InsufficientBalance
5. provider call under timeout            -> GenerationFailed (no writes)
6. artifact insert                        -> PersistenceFailed (balance untouched)
7. conditional debit with optimistic retry
   - lost the race and can no longer afford it -> artifact removed, InsufficientBalance
   - store failure / retries exhausted         -> success flagged debit_failed

The debit is last so a failed generation never costs the user anything. A
debit that cannot be applied after the artifact exists is the one accepted
inconsistency: it is returned as success-with-warning, logged at error level
and written to the credit ledger for reconciliation.
"""

import asyncio
from enum import StrEnum
from uuid import UUID

import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from content_studio.core.exceptions import StoreError
from content_studio.db.models.artifact import Artifact
from content_studio.db.models.credit_ledger import LEDGER_STATUS_DEBIT_FAILED, LEDGER_STATUS_DEBITED
from content_studio.domain.outcomes import (
    GenerationRequest,
    GenerationSuccess,
    Rejection,
    RejectionKind,
    insufficient_balance,
    missing_identity,
    not_found_or_unauthorized,
    unknown_account,
)
from content_studio.domain.pricing import credit_cost, generation_budget
from content_studio.domain.prompts import SYSTEM_PROMPT, compose_instruction
from content_studio.providers.base import GenerationProvider
from content_studio.stores.base import ArtifactStore, BalanceStore, CreditLedger, DebitStatus

logger = structlog.get_logger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SECONDS: float = 60.0
DEFAULT_MAX_DEBIT_ATTEMPTS: int = 5

DEBIT_FAILED_WARNING = "Content generated but credit deduction failed"


class _DebitConflict(Exception):
    """Balance changed between read and conditional write."""


class _DebitOutcome(StrEnum):
    DEBITED = "debited"
    INSUFFICIENT = "insufficient"
    ACCOUNT_GONE = "account_gone"
    EXHAUSTED = "exhausted"


class GenerationService:
    """Orchestrates metered generation, listing and deletion.

    All collaborators are injected; the service holds no global state and
    no per-account locks (the balance store's conditional debit is the only
    coordination point between concurrent requests).
    """

    def __init__(
        self,
        balance_store: BalanceStore,
        artifact_store: ArtifactStore,
        provider: GenerationProvider,
        ledger: CreditLedger | None = None,
        provider_timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        max_debit_attempts: int = DEFAULT_MAX_DEBIT_ATTEMPTS,
    ):
        if max_debit_attempts < 1:
            raise ValueError("max_debit_attempts must be at least 1")
        self.balance_store = balance_store
        self.artifact_store = artifact_store
        self.provider = provider
        self.ledger = ledger
        self.provider_timeout_seconds = provider_timeout_seconds
        self.max_debit_attempts = max_debit_attempts

    async def generate(self, account_id: str | None, request: GenerationRequest) -> GenerationSuccess | Rejection:
        """Run one credit-metered generation for ``account_id``.

        Returns:
            GenerationSuccess (``billing_consistent`` False for a failed debit) or a Rejection.
        """
        if not account_id:
            return missing_identity()

        missing = request.missing_fields()
        if missing:
            return Rejection(
                RejectionKind.INVALID_REQUEST,
                "Missing required fields",
                {"fields": missing},
            )

        bound = logger.bind(account_id=account_id, content_type=request.content_type, length=request.length)

        try:
            balance = await self.balance_store.read(account_id)
        except StoreError as exc:
            bound.error("balance_read_failed", error=str(exc))
            return Rejection(RejectionKind.PERSISTENCE_FAILED, "Failed to read credits")

        if balance is None:
            return unknown_account()

        cost = credit_cost(request.length)
        if balance < cost:
            bound.info("generation_rejected_insufficient_balance", required=cost, available=balance)
            return insufficient_balance(cost, balance)

        budget = generation_budget(request.length)
        instruction = compose_instruction(
            request.content_type,
            request.topic,
            request.tone,
            request.length,
            request.additional_context,
        )

        body = await self._call_provider(instruction, budget, bound)
        if body is None:
            return Rejection(RejectionKind.GENERATION_FAILED, "Failed to generate content")

        try:
            artifact = await self.artifact_store.insert(
                owner_id=account_id,
                content_type=request.content_type,
                topic=request.topic,
                body=body,
                cost=cost,
                metadata=request.metadata(),
            )
        except StoreError as exc:
            bound.error("artifact_persist_failed", cost=cost, error=str(exc))
            return Rejection(RejectionKind.PERSISTENCE_FAILED, "Failed to save content")

        bound = bound.bind(artifact_id=str(artifact.id), cost=cost)
        return await self._settle(account_id, artifact, cost, balance, bound)

    async def _call_provider(self, instruction: str, budget: int, bound) -> str | None:
        """Invoke the provider under the timeout; None on any failure or empty output."""
        try:
            body = await asyncio.wait_for(
                self.provider.complete(instruction, budget, system=SYSTEM_PROMPT),
                timeout=self.provider_timeout_seconds,
            )
        except TimeoutError:
            bound.warning("generation_timed_out", timeout_seconds=self.provider_timeout_seconds)
            return None
        except Exception as exc:
            bound.warning("generation_provider_failed", error=str(exc), error_type=type(exc).__name__)
            return None

        if not body or not body.strip():
            bound.warning("generation_empty_output")
            return None
        return body

    async def _settle(
        self,
        account_id: str,
        artifact: Artifact,
        cost: int,
        balance: int,
        bound,
    ) -> GenerationSuccess | Rejection:
        """Debit for a persisted artifact, compensating or flagging on failure."""
        try:
            outcome, observed = await self._debit(account_id, cost, balance)
        except StoreError as exc:
            return await self._debit_failed(account_id, artifact, cost, balance, str(exc), bound)
        except asyncio.CancelledError:
            # The artifact exists; whether the debit landed is unknown
            await self._debit_failed(
                account_id, artifact, cost, balance, "cancelled during debit", bound
            )
            raise

        if outcome == _DebitOutcome.DEBITED:
            await self._record_ledger(account_id, artifact, cost, LEDGER_STATUS_DEBITED, observed, None, bound)
            bound.info("generation_succeeded", remaining_credits=observed)
            return GenerationSuccess(artifact=artifact, cost=cost, remaining_credits=observed)

        if outcome == _DebitOutcome.EXHAUSTED:
            return await self._debit_failed(
                account_id, artifact, cost, observed, "debit retries exhausted", bound
            )

        # A concurrent request spent the balance (or the account vanished):
        # remove the unpaid artifact so the store matches "never generated".
        try:
            await self.artifact_store.delete_by_id_and_owner(artifact.id, account_id)
        except StoreError as exc:
            return await self._debit_failed(
                account_id, artifact, cost, observed or 0, f"compensation delete failed: {exc}", bound
            )
        except asyncio.CancelledError:
            await self._debit_failed(
                account_id, artifact, cost, observed or 0, "cancelled during compensation delete", bound
            )
            raise

        if outcome == _DebitOutcome.ACCOUNT_GONE:
            bound.warning("generation_compensated_account_gone")
            return unknown_account()

        bound.info("generation_compensated_insufficient_balance", available=observed)
        return insufficient_balance(cost, observed)

    async def _debit(self, account_id: str, cost: int, expected_balance: int) -> tuple[_DebitOutcome, int | None]:
        """Optimistic-concurrency debit loop.

        Attempt 1 uses the balance read during validation; every retry
        re-reads, re-checks sufficiency and re-issues the conditional write.

        Returns:
            (outcome, balance) where balance is the new balance on success,
            otherwise the last observed balance.

        Raises:
            StoreError: store failure (not retried)
        """
        balance = expected_balance
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(_DebitConflict),
                stop=stop_after_attempt(self.max_debit_attempts),
                wait=wait_exponential(multiplier=0.01, max=0.2),
                reraise=True,
                before_sleep=lambda rs: logger.debug(
                    "debit_conflict_retrying",
                    account_id=account_id,
                    attempt=rs.attempt_number,
                ),
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        current = await self.balance_store.read(account_id)
                        if current is None:
                            return _DebitOutcome.ACCOUNT_GONE, None
                        balance = current
                        if balance < cost:
                            return _DebitOutcome.INSUFFICIENT, balance

                    result = await self.balance_store.conditional_debit(account_id, cost, balance)
                    if result.status == DebitStatus.OK:
                        return _DebitOutcome.DEBITED, result.new_balance
                    if result.status == DebitStatus.NOT_FOUND:
                        return _DebitOutcome.ACCOUNT_GONE, None
                    raise _DebitConflict()
        except _DebitConflict:
            return _DebitOutcome.EXHAUSTED, balance

        # Unreachable: the loop always returns or raises
        raise RuntimeError("debit_loop_exhausted")  # pragma: no cover

    async def _debit_failed(
        self,
        account_id: str,
        artifact: Artifact,
        cost: int,
        last_known_balance: int,
        reason: str,
        bound,
    ) -> GenerationSuccess:
        bound.error(
            "debit_failed_reconciliation_required",
            reason=reason,
            last_known_balance=last_known_balance,
        )
        await self._record_ledger(
            account_id, artifact, cost, LEDGER_STATUS_DEBIT_FAILED, None, reason, bound
        )
        return GenerationSuccess(
            artifact=artifact,
            cost=cost,
            remaining_credits=last_known_balance,
            billing_consistent=False,
            warning=DEBIT_FAILED_WARNING,
        )

    async def _record_ledger(
        self,
        account_id: str,
        artifact: Artifact,
        cost: int,
        status: str,
        balance_after: int | None,
        reason: str | None,
        bound,
    ) -> None:
        """Best-effort ledger write; never changes the transaction outcome."""
        if self.ledger is None:
            return
        try:
            await self.ledger.record(
                account_id=account_id,
                artifact_id=artifact.id,
                cost=cost,
                status=status,
                balance_after=balance_after,
                reason=reason,
            )
        except Exception as e:
            bound.warning("ledger_write_failed", status=status, error=str(e), error_type=type(e).__name__)

    # ------------------------------------------------------------------
    # Listing, deletion, balance
    # ------------------------------------------------------------------

    async def list_artifacts(self, account_id: str | None) -> list[Artifact] | Rejection:
        """All artifacts owned by ``account_id``, newest first (fresh read each call)."""
        if not account_id:
            return missing_identity()
        try:
            return await self.artifact_store.list_by_owner(account_id)
        except StoreError as exc:
            logger.error("artifact_list_failed", account_id=account_id, error=str(exc))
            return Rejection(RejectionKind.PERSISTENCE_FAILED, "Failed to fetch content history")

    async def delete_artifact(self, account_id: str | None, artifact_id: UUID | str) -> bool | Rejection:
        """Delete an owned artifact. Foreign and missing ids are indistinguishable.

        Credits are not refunded.
        """
        if not account_id:
            return missing_identity()

        if not isinstance(artifact_id, UUID):
            try:
                artifact_id = UUID(str(artifact_id))
            except ValueError:
                return not_found_or_unauthorized()

        try:
            deleted = await self.artifact_store.delete_by_id_and_owner(artifact_id, account_id)
        except StoreError as exc:
            logger.error("artifact_delete_failed", account_id=account_id, artifact_id=str(artifact_id), error=str(exc))
            return Rejection(RejectionKind.PERSISTENCE_FAILED, "Failed to delete content")

        if not deleted:
            return not_found_or_unauthorized()

        logger.info("artifact_deleted", account_id=account_id, artifact_id=str(artifact_id))
        return True

    async def get_credits(self, account_id: str | None) -> int | Rejection:
        if not account_id:
            return missing_identity()
        try:
            balance = await self.balance_store.read(account_id)
        except StoreError as exc:
            logger.error("balance_read_failed", account_id=account_id, error=str(exc))
            return Rejection(RejectionKind.PERSISTENCE_FAILED, "Failed to read credits")
        if balance is None:
            return unknown_account()
        return balance
