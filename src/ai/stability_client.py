"""Stability AI client for image generation."""

import asyncio
import base64
import binascii
import logging
from typing import Any

import requests

from src.ai.base import ImageGenerator
from src.ai.exceptions import InvalidPromptError, StabilityClientError
from src.ai.media import MediaStore
from src.ai.utils.config import StabilityConfig

logger = logging.getLogger(__name__)

MIN_PROMPT_LENGTH = 3
MAX_PROMPT_LENGTH = 2000

# Prompts containing any of these are refused before reaching the provider
BLOCKED_PROMPT_TERMS = ("explicit", "nsfw", "nude", "adult")


def validate_prompt(prompt: str) -> str:
    """Check an image prompt before it is sent to the provider.

    :param prompt: Image description.
    :returns: The stripped prompt.
    :raises InvalidPromptError: If the prompt is too short, too long or blocked.
    """
    prompt = prompt.strip()
    if len(prompt) < MIN_PROMPT_LENGTH:
        raise InvalidPromptError(f"must be at least {MIN_PROMPT_LENGTH} characters long")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise InvalidPromptError(f"must be at most {MAX_PROMPT_LENGTH} characters long")

    lowered = prompt.lower()
    if any(term in lowered for term in BLOCKED_PROMPT_TERMS):
        raise InvalidPromptError("inappropriate content")
    return prompt


def prefer_enhanced_prompt(enhanced: str, original: str) -> str:
    """Pick the rewritten prompt when it is itself valid, else the original.

    The original must already have passed ``validate_prompt``.

    :param enhanced: Prompt rewritten by the text generator.
    :param original: The validated user prompt.
    :returns: The prompt to render.
    """
    try:
        return validate_prompt(enhanced)
    except InvalidPromptError as e:
        logger.info(f"Enhanced prompt rejected ({e.reason}), using the original prompt")
        return original


class StabilityClient(ImageGenerator):
    """Client for the Stability AI text-to-image API.

    Rendered images are kept in a MediaStore and handed out by URL.
    """

    def __init__(self, config: StabilityConfig, media_store: MediaStore) -> None:
        """Initialise the Stability client.

        :param config: Stability settings.
        :param media_store: Store that serves generated images.
        """
        self._config = config
        self._media_store = media_store
        self._base_url = config.base_url.rstrip("/")
        logger.debug(
            f"StabilityClient initialised: engine={config.engine}, "
            f"request_timeout={config.request_timeout}s"
        )

    def text_to_image(self, prompt: str) -> bytes:
        """Generate a PNG image for a prompt.

        :param prompt: Image description.
        :returns: PNG bytes.
        :raises StabilityClientError: If the API request fails.
        """
        url = f"{self._base_url}/v1/generation/{self._config.engine}/text-to-image"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload: dict[str, Any] = {
            "text_prompts": [
                {"text": prompt, "weight": 1},
                {"text": self._config.negative_prompt, "weight": -1},
            ],
            "cfg_scale": self._config.cfg_scale,
            "height": self._config.height,
            "width": self._config.width,
            "steps": self._config.steps,
            "samples": 1,
        }

        logger.info(f"Generating image with prompt: {prompt[:100]!r}")
        try:
            response = requests.post(
                url,
                json=payload,
                headers=headers,
                timeout=self._config.request_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise StabilityClientError(
                f"Stability API request timed out after {self._config.request_timeout}s"
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise StabilityClientError(f"Stability API request failed: {e}") from e

        artifacts = data.get("artifacts") or []
        if not artifacts or not artifacts[0].get("base64"):
            raise StabilityClientError("Stability API returned no image")

        try:
            return base64.b64decode(artifacts[0]["base64"])
        except (binascii.Error, ValueError) as e:
            raise StabilityClientError("Stability API returned an invalid image") from e

    async def render(self, prompt: str) -> str:
        """Render an image and return its public URL.

        :param prompt: Image description.
        :returns: URL the image is served at.
        :raises InvalidPromptError: If the prompt is rejected.
        :raises StabilityClientError: If generation fails.
        """
        prompt = validate_prompt(prompt)
        image = await asyncio.to_thread(self.text_to_image, prompt)
        item = self._media_store.put(image, content_type="image/png")
        return self._media_store.url_for(item.media_id)
