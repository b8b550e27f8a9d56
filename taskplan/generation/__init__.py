"""Generation clients - turn prompts into model output."""

from taskplan.generation.client import AnthropicGenerationClient, GenerationClient

__all__ = [
    "AnthropicGenerationClient",
    "GenerationClient",
]
