"""DemoService — unmetered, unpersisted sample generation for anonymous visitors."""

import asyncio

import structlog

from content_studio.domain.outcomes import Rejection, RejectionKind
from content_studio.domain.prompts import DEMO_SYSTEM_PROMPT, compose_demo_instruction
from content_studio.providers.base import GenerationProvider

logger = structlog.get_logger(__name__)

DEMO_GENERATION_BUDGET: int = 300
DEMO_TIMEOUT_SECONDS: float = 30.0


class DemoService:
    def __init__(self, provider: GenerationProvider, timeout_seconds: float = DEMO_TIMEOUT_SECONDS):
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def generate(self, content_type: str | None, topic: str | None, tone: str | None) -> str | Rejection:
        """Return demo content, or a Rejection (InvalidRequest / GenerationFailed).

        Nothing is persisted and no credits are involved.
        """
        fields = {"content_type": content_type, "topic": topic, "tone": tone}
        missing = [name for name, value in fields.items() if not value or not value.strip()]
        if missing:
            return Rejection(RejectionKind.INVALID_REQUEST, "Missing required fields", {"fields": missing})

        instruction = compose_demo_instruction(content_type, topic, tone)
        try:
            body = await asyncio.wait_for(
                self.provider.complete(instruction, DEMO_GENERATION_BUDGET, system=DEMO_SYSTEM_PROMPT),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            logger.warning("demo_generation_failed", error=str(exc), error_type=type(exc).__name__)
            return Rejection(RejectionKind.GENERATION_FAILED, "Failed to generate demo content")

        if not body or not body.strip():
            logger.warning("demo_generation_empty_output")
            return Rejection(RejectionKind.GENERATION_FAILED, "Failed to generate demo content")

        return body
