from fastapi import APIRouter, Depends

from content_studio.api.deps import get_generation_service
from content_studio.api.errors import raise_for_rejection
from content_studio.core.auth import ClerkUser, require_auth
from content_studio.domain.outcomes import Rejection
from content_studio.schemas.content import CreditsResponse
from content_studio.services.generation_service import GenerationService

router = APIRouter()


@router.get("/credits", response_model=CreditsResponse)
async def get_credits(
    user: ClerkUser = Depends(require_auth),
    service: GenerationService = Depends(get_generation_service),
):
    """Current credit balance of the caller."""
    balance = await service.get_credits(user.user_id)
    if isinstance(balance, Rejection):
        raise_for_rejection(balance)
    return CreditsResponse(credits=balance)
