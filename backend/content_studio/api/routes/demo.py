"""Public demo generation — no auth, no credits, nothing persisted."""

from fastapi import APIRouter, Depends, HTTPException

from content_studio.api.deps import get_demo_service
from content_studio.api.errors import raise_for_rejection
from content_studio.core.config import get_settings
from content_studio.domain.outcomes import Rejection
from content_studio.schemas.content import DemoGenerateRequest, DemoGenerateResponse
from content_studio.services.demo_service import DemoService

router = APIRouter()


@router.post("/generate", response_model=DemoGenerateResponse)
async def demo_generate(
    body: DemoGenerateRequest,
    service: DemoService = Depends(get_demo_service),
):
    if not get_settings().demo_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    result = await service.generate(body.content_type, body.topic, body.tone)
    if isinstance(result, Rejection):
        raise_for_rejection(result)

    return DemoGenerateResponse(
        content=result,
        message=f"Demo content generated successfully ({service.provider.name})",
    )
