"""Generation provider backends and configuration-driven selection."""

from content_studio.core.config import Settings
from content_studio.providers.anthropic_provider import AnthropicProvider
from content_studio.providers.base import GenerationProvider
from content_studio.providers.fake import FakeProvider
from content_studio.providers.openai_provider import OpenAICompatibleProvider

SUPPORTED_PROVIDERS = ("anthropic", "openai", "openrouter", "fake")


def build_provider(settings: Settings) -> GenerationProvider:
    """Construct the provider named by ``settings.generation_provider``.

    Raises:
        ValueError: for an unknown provider name
    """
    name = settings.generation_provider.strip().lower()

    if name == "anthropic":
        return AnthropicProvider(model=settings.anthropic_model, api_key=settings.anthropic_api_key)

    if name == "openai":
        return OpenAICompatibleProvider(model=settings.openai_model, api_key=settings.openai_api_key)

    if name == "openrouter":
        return OpenAICompatibleProvider(
            model=settings.openrouter_model,
            api_key=settings.openrouter_api_key,
            name="openrouter",
            base_url=settings.openrouter_base_url,
        )

    if name == "fake":
        return FakeProvider()

    raise ValueError(
        f"Unknown generation provider: {settings.generation_provider!r}. "
        f"Supported: {', '.join(SUPPORTED_PROVIDERS)}"
    )


__all__ = [
    "AnthropicProvider",
    "FakeProvider",
    "GenerationProvider",
    "OpenAICompatibleProvider",
    "SUPPORTED_PROVIDERS",
    "build_provider",
]
