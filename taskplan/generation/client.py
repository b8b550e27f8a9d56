"""Generation client interface and the Anthropic-backed implementation."""

import time
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from taskplan.core.config import Settings, get_settings
from taskplan.decomposition.errors import DecomposerError
from taskplan.decomposition.models import GenerationResult


@runtime_checkable
class GenerationClient(Protocol):
    """Executes one prompt against a generative model.

    Cancellation is the caller's: cancelling the awaiting task raises
    ``asyncio.CancelledError`` out of ``execute``.
    """

    async def execute(self, prompt: str) -> GenerationResult:
        """Run the prompt and return the model output with cost and duration."""
        ...


class AnthropicGenerationClient:
    """
    Generation client backed by the Anthropic Messages API.

    The SDK client is created lazily on first use so constructing this
    class never needs an API key.

    Example:
        >>> client = AnthropicGenerationClient()
        >>> result = await client.execute(prompt)
        >>> result.cost
        0.0421
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: Any = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Optional settings override.
            client: Optional pre-built ``AsyncAnthropic`` instance.
        """
        self.settings = settings or get_settings()
        self._client: Any = client

    def _get_client(self) -> Any:
        if self._client is None:
            from anthropic import AsyncAnthropic

            api_key = self.settings.anthropic_api_key
            if api_key is None:
                raise DecomposerError(
                    phase="config",
                    message="ANTHROPIC_API_KEY is not set",
                )
            self._client = AsyncAnthropic(api_key=api_key.get_secret_value())
        return self._client

    async def aclose(self) -> None:
        """Close the SDK client and its HTTP connections, if one was created."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def execute(self, prompt: str) -> GenerationResult:
        """
        Send the prompt and collect the text response.

        Args:
            prompt: Prompt text.

        Returns:
            GenerationResult with output text, cost in USD and duration.
        """
        client = self._get_client()
        model = self.settings.taskplan_model

        logger.debug(f"Calling {model} ({len(prompt)} chars prompt)")
        start = time.perf_counter()

        response = await client.messages.create(
            model=model,
            max_tokens=self.settings.taskplan_max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        duration = time.perf_counter() - start
        output = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        cost = self.estimate_cost(
            getattr(response.usage, "input_tokens", 0),
            getattr(response.usage, "output_tokens", 0),
        )

        logger.info(f"Generation finished in {duration:.1f}s, cost ${cost:.4f}")
        return GenerationResult(output=output, cost=cost, duration_seconds=duration)

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Cost in USD for the given token usage."""
        return (
            input_tokens * self.settings.taskplan_input_cost_per_mtok
            + output_tokens * self.settings.taskplan_output_cost_per_mtok
        ) / 1_000_000
