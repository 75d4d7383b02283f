"""API endpoints for generating images."""

import logging
import time

from fastapi import APIRouter, Depends

from src.ai import prompts
from src.ai.stability_client import prefer_enhanced_prompt, validate_prompt
from src.api.dependencies import get_services, strict_rate_limit
from src.api.images.models import GenerateImageRequest, GenerateImageResponse
from src.assistant.services import AssistantServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])

ENHANCE_MAX_TOKENS = 200


@router.post(
    "",
    response_model=GenerateImageResponse,
    summary="Generate image",
    description="Generates an image and optionally sends it to a WhatsApp recipient.",
    dependencies=[Depends(strict_rate_limit)],
)
async def generate_image(
    request: GenerateImageRequest,
    services: AssistantServices = Depends(get_services),
) -> GenerateImageResponse:
    """Generate an image from a prompt.

    :raises InvalidPromptError: If the prompt is rejected (mapped to 400).
    :raises ProviderUnavailableError: If a provider call fails (mapped to 502).
    """
    start = time.perf_counter()
    prompt = validate_prompt(request.prompt)

    if request.enhance:
        enhanced = await services.text_generator.complete(
            prompts.image_prompt(prompt), max_tokens=ENHANCE_MAX_TOKENS
        )
        prompt = prefer_enhanced_prompt(enhanced, prompt)

    url = await services.image_generator.render(prompt)

    sent = False
    if request.recipient:
        await services.notifier.send_media(request.recipient, url, request.prompt)
        sent = True

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Generate image complete: sent={sent}, elapsed={elapsed_ms:.0f}ms")
    return GenerateImageResponse(url=url, prompt=prompt, sent=sent)
