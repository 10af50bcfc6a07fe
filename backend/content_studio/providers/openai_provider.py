"""OpenAICompatibleProvider — chat completions over openai.AsyncOpenAI.

Serves both OpenAI itself and OpenRouter (same wire format, different
``base_url`` and model naming).
"""

import openai

from content_studio.core.exceptions import ProviderError

DEFAULT_TEMPERATURE: float = 0.7


class OpenAICompatibleProvider:
    """GenerationProvider backed by an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        model: str,
        api_key: str,
        *,
        name: str = "openai",
        base_url: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self.name = name
        self._model = model
        self._temperature = temperature
        self._client = client or openai.AsyncOpenAI(api_key=api_key, base_url=base_url)

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
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": instruction})

        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                max_tokens=max_output_tokens,
                temperature=self._temperature,
            )
        except openai.OpenAIError as exc:
            raise ProviderError(self.name, f"{type(exc).__name__}: {exc}") from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self._client.close()
