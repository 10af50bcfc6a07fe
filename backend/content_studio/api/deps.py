"""FastAPI dependencies resolving the services constructed in the app lifespan.

Override these via ``app.dependency_overrides`` in tests.
"""

from fastapi import HTTPException, Request

from content_studio.services.demo_service import DemoService
from content_studio.services.generation_service import GenerationService


def get_generation_service(request: Request) -> GenerationService:
    service = getattr(request.app.state, "generation_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service


def get_demo_service(request: Request) -> DemoService:
    service = getattr(request.app.state, "demo_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service
