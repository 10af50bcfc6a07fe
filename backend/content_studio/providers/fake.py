"""FakeProvider: Scenario-based test double for the GenerationProvider protocol.

Provides deterministic responses for named scenarios:
- happy_path: Returns realistic content built from the instruction
- provider_failure: Raises ProviderError on every call
- empty_output: Returns an empty string
- slow: Sleeps ``delay_seconds`` before answering (timeout testing)

Also selectable at runtime with GENERATION_PROVIDER=fake for local development
without provider credentials.
"""

import asyncio

from content_studio.core.exceptions import ProviderError


class FakeProvider:
    """Scenario-based test double for GenerationProvider.

    Every call is recorded in ``calls`` as (instruction, max_output_tokens, system).
    """

    name = "fake"

    VALID_SCENARIOS = {"happy_path", "provider_failure", "empty_output", "slow"}

    def __init__(self, scenario: str = "happy_path", delay_seconds: float = 5.0):
        """Initialize FakeProvider with a named scenario.

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}"
            )
        self.scenario = scenario
        self.delay_seconds = delay_seconds
        self.calls: list[tuple[str, int, str | None]] = []

    async def complete(
        self,
        instruction: str,
        max_output_tokens: int,
        *,
        system: str | None = None,
    ) -> str:
        self.calls.append((instruction, max_output_tokens, system))

        if self.scenario == "provider_failure":
            raise ProviderError(self.name, "Rate limit exceeded. Retry after 60 seconds.")

        if self.scenario == "empty_output":
            return ""

        if self.scenario == "slow":
            await asyncio.sleep(self.delay_seconds)

        first_line = instruction.splitlines()[0] if instruction else ""
        return (
            "# Draft\n\n"
            f"{first_line}\n\n"
            "Great content starts with a clear promise to the reader. This draft "
            "opens with the key idea, supports it with two concrete examples, and "
            "closes with a short call to action."
        )

    async def close(self) -> None:
        return None
