"""Pydantic schemas for the content API.

Wire format is camelCase (``contentType``, ``remainingCredits``); snake_case
names are accepted on input as well.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from content_studio.db.models.artifact import Artifact
from content_studio.domain.outcomes import GenerationRequest


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateContentRequest(_CamelModel):
    """Body of POST /content/generate.

    Required fields are optional at the schema level so that absence is
    reported as an ``invalid_request`` rejection rather than a 422.
    """

    content_type: str | None = Field(None, description="blog-post, social-media, email, ...")
    topic: str | None = None
    tone: str | None = None
    length: str | None = Field(None, description="short, medium, long or extended")
    additional_context: str | None = None

    def to_domain(self) -> GenerationRequest:
        return GenerationRequest(
            content_type=self.content_type,
            topic=self.topic,
            tone=self.tone,
            length=self.length,
            additional_context=self.additional_context,
        )


class GenerateContentResponse(_CamelModel):
    content: str
    cost: int
    remaining_credits: int
    artifact_id: UUID
    billing_warning: str | None = None


class ArtifactResponse(_CamelModel):
    id: UUID
    content_type: str
    topic: str
    content: str
    cost: int
    metadata: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_model(cls, artifact: Artifact) -> "ArtifactResponse":
        return cls(
            id=artifact.id,
            content_type=artifact.content_type,
            topic=artifact.topic,
            content=artifact.body,
            cost=artifact.cost,
            metadata=artifact.generation_metadata or {},
            created_at=artifact.created_at,
        )


class HistoryResponse(_CamelModel):
    content: list[ArtifactResponse]
    count: int


class CreditsResponse(_CamelModel):
    credits: int


class MessageResponse(_CamelModel):
    message: str


class DemoGenerateRequest(_CamelModel):
    content_type: str | None = None
    topic: str | None = None
    tone: str | None = None


class DemoGenerateResponse(_CamelModel):
    content: str
    message: str


class PricingTier(_CamelModel):
    length: str
    label: str
    cost: int
    word_range: str


class PricingResponse(_CamelModel):
    tiers: list[PricingTier]
    content_types: dict[str, str]
    tones: dict[str, str]
