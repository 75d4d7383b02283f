"""AI providers for text and image generation."""

from src.ai.base import ImageGenerator, TextGenerator
from src.ai.bedrock_client import MODEL_ALIASES, BedrockClient, resolve_model_id
from src.ai.exceptions import BedrockClientError, InvalidPromptError, StabilityClientError
from src.ai.media import MediaStore, StoredMedia
from src.ai.models import ChatRole, ChatTurn
from src.ai.stability_client import StabilityClient, validate_prompt

__all__ = [
    "MODEL_ALIASES",
    "BedrockClient",
    "BedrockClientError",
    "ChatRole",
    "ChatTurn",
    "ImageGenerator",
    "InvalidPromptError",
    "MediaStore",
    "StabilityClient",
    "StabilityClientError",
    "StoredMedia",
    "TextGenerator",
    "resolve_model_id",
    "validate_prompt",
]
