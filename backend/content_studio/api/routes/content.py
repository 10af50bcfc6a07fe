"""Content API routes — metered generation, history, deletion."""

import asyncio

from fastapi import APIRouter, Depends, Response

from content_studio.api.deps import get_generation_service
from content_studio.api.errors import raise_for_rejection
from content_studio.core.auth import ClerkUser, require_auth
from content_studio.domain.outcomes import Rejection
from content_studio.schemas.content import (
    ArtifactResponse,
    GenerateContentRequest,
    GenerateContentResponse,
    HistoryResponse,
    MessageResponse,
)
from content_studio.services.generation_service import GenerationService

router = APIRouter()

# Strong references to in-flight transactions outliving a disconnected client
_inflight: set[asyncio.Task] = set()


async def drain_inflight(timeout: float) -> int:
    """Wait up to ``timeout`` seconds for in-flight generations to settle.

    Transactions still running afterwards are cancelled and awaited, so their
    reconciliation records are written before the database goes away.

    Returns:
        Number of transactions that had to be cancelled
    """
    if not _inflight:
        return 0

    _, pending = await asyncio.wait(set(_inflight), timeout=timeout)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
    return len(pending)


@router.post("/generate", response_model=GenerateContentResponse, response_model_exclude_none=True)
async def generate_content(
    body: GenerateContentRequest,
    response: Response,
    user: ClerkUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
):
    """Generate content and charge the caller's credits.

    The transaction runs as its own task and is shielded, so a client that
    disconnects mid-generation does not abandon a half-finished transaction.

    Returns: {content, cost, remainingCredits, artifactId[, billingWarning]}
    """
    task = asyncio.ensure_future(service.generate(user.user_id, body.to_domain()))
    _inflight.add(task)
    task.add_done_callback(_inflight.discard)

    outcome = await asyncio.shield(task)

    if isinstance(outcome, Rejection):
        raise_for_rejection(outcome)

    if outcome.debit_failed:
        response.headers["X-Billing-Warning"] = "debit-failed"

    return GenerateContentResponse(
        content=outcome.artifact.body,
        cost=outcome.cost,
        remaining_credits=outcome.remaining_credits,
        artifact_id=outcome.artifact.id,
        billing_warning=outcome.warning,
    )


@router.get("/history", response_model=HistoryResponse)
async def content_history(
    user: ClerkUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
):
    """All of the caller's content, newest first."""
    artifacts = await service.list_artifacts(user.user_id)
    if isinstance(artifacts, Rejection):
        raise_for_rejection(artifacts)

    items = [ArtifactResponse.from_model(a) for a in artifacts]
    return HistoryResponse(content=items, count=len(items))


@router.delete("/{content_id}", response_model=MessageResponse)
async def delete_content(
    content_id: str,
    user: ClerkUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
):
    """Delete one of the caller's artifacts.

    Returns 404 both for ids owned by someone else and for ids that do not
    exist. Credits are not refunded.
    """
    result = await service.delete_artifact(user.user_id, content_id)
    if isinstance(result, Rejection):
        raise_for_rejection(result)
    return MessageResponse(message="Content deleted successfully")
