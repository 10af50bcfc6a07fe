"""GenerationProvider Protocol: the single capability the generation transaction needs.

Implementations:
- AnthropicProvider: anthropic.AsyncAnthropic messages API
- OpenAICompatibleProvider: openai.AsyncOpenAI chat completions (OpenAI, OpenRouter)
- FakeProvider: deterministic test double with named scenarios
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationProvider(Protocol):
    """Text completion over a synchronous request/response call."""

    name: str

    async def complete(
        self,
        instruction: str,
        max_output_tokens: int,
        *,
        system: str | None = None,
    ) -> str:
        """Return generated text for ``instruction``.

        Args:
            instruction: User-facing instruction text
            max_output_tokens: Provider-side output ceiling
            system: Optional system prompt

        Returns:
            Generated text (may be empty; callers decide whether that is a failure)

        Raises:
            ProviderError: on any provider-side failure
        """
        ...
