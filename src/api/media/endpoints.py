"""Serves generated images to WhatsApp."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.dependencies import get_services
from src.assistant.services import AssistantServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/media", tags=["Media"])


@router.get(
    "/{media_id}",
    summary="Get generated media",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"description": "Unknown media"}},
)
def get_media(
    media_id: str,
    services: AssistantServices = Depends(get_services),
) -> Response:
    """Return a generated image by id.

    :raises HTTPException: If the media is unknown or has been evicted.
    """
    item = services.media_store.get(media_id)
    if item is None:
        logger.info(f"Media not found: media_id={media_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Media not found")
    return Response(content=item.data, media_type=item.content_type)
