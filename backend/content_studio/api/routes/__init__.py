from fastapi import APIRouter

from content_studio.api.routes import content, demo, health, pricing, user

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(pricing.router, tags=["pricing"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
api_router.include_router(demo.router, prefix="/demo", tags=["demo"])
