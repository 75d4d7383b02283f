"""Base classes for AI capabilities.

Provides abstract interfaces for text and image generation so providers can be
swapped (e.g. Bedrock -> another LLM host) without changing call sites.
"""

from abc import ABC, abstractmethod

from src.ai.models import ChatTurn


class TextGenerator(ABC):
    """Abstract base class for text generation providers.

    Implementations raise a ProviderUnavailableError subclass on any provider
    failure, including timeouts.
    """

    @abstractmethod
    async def complete(self, prompt: str, *, max_tokens: int = 500) -> str:
        """Generate a single completion for a prompt.

        :param prompt: User prompt.
        :param max_tokens: Maximum tokens in the response.
        :returns: Generated text.
        """
        ...

    @abstractmethod
    async def chat(
        self,
        turns: list[ChatTurn],
        system_prompt: str,
        *,
        max_tokens: int = 500,
    ) -> str:
        """Generate the next assistant turn of a conversation.

        :param turns: Conversation so far, oldest first, ending with a user turn.
        :param system_prompt: System instruction.
        :param max_tokens: Maximum tokens in the response.
        :returns: Generated reply.
        """
        ...


class ImageGenerator(ABC):
    """Abstract base class for image generation providers."""

    @abstractmethod
    async def render(self, prompt: str) -> str:
        """Render an image for a prompt.

        :param prompt: Image description.
        :returns: Publicly reachable URL of the rendered image.
        """
        ...
