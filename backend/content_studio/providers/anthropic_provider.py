"""AnthropicProvider — direct anthropic.AsyncAnthropic messages call."""

import anthropic

from content_studio.core.exceptions import ProviderError


class AnthropicProvider:
    """GenerationProvider backed by the Anthropic messages API.

    The client is constructed once and reused; the API key never leaves
    this object.
    """

    name = "anthropic"

    def __init__(self, model: str, api_key: str, client: anthropic.AsyncAnthropic | None = None) -> None:
        self._model = model
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key)

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        instruction: str,
        max_output_tokens: int,
        *,
        system: str | None = None,
    ) -> str:
        kwargs = {}
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_output_tokens,
                messages=[{"role": "user", "content": instruction}],
                **kwargs,
            )
        except anthropic.APIError as exc:
            raise ProviderError(self.name, f"{type(exc).__name__}: {exc}") from exc

        text_blocks = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return "".join(text_blocks)

    async def close(self) -> None:
        await self._client.close()
