"""Custom exceptions for the AI provider module."""

from src.exceptions import ProviderUnavailableError


class BedrockClientError(ProviderUnavailableError):
    """Error related to AWS Bedrock API calls."""


class StabilityClientError(ProviderUnavailableError):
    """Error related to Stability AI API calls."""


class InvalidPromptError(ValueError):
    """Raised when an image prompt is rejected before reaching the provider."""

    def __init__(self, reason: str) -> None:
        """Initialise InvalidPromptError.

        :param reason: Why the prompt was rejected.
        """
        self.reason = reason
        super().__init__(f"Invalid prompt: {reason}")
