from fastapi import APIRouter

from content_studio.domain.pricing import pricing_table
from content_studio.domain.prompts import CONTENT_TYPES, TONES
from content_studio.schemas.content import PricingResponse, PricingTier

router = APIRouter()


@router.get("/pricing", response_model=PricingResponse)
async def get_pricing():
    """Credit cost and word range per length tier, plus the known content types and tones."""
    return PricingResponse(
        tiers=[PricingTier(**tier) for tier in pricing_table()],
        content_types=CONTENT_TYPES,
        tones=TONES,
    )
