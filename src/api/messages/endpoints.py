"""API endpoint for sending WhatsApp messages."""

import logging

from fastapi import APIRouter, Depends

from src.api.dependencies import get_services
from src.api.messages.models import SendMessageRequest, SendMessageResponse
from src.assistant.services import AssistantServices

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post(
    "",
    response_model=SendMessageResponse,
    summary="Send message",
    description="Sends a text message to a WhatsApp recipient.",
)
async def send_message(
    request: SendMessageRequest,
    services: AssistantServices = Depends(get_services),
) -> SendMessageResponse:
    """Send a text message through the notifier."""
    logger.info(f"Send message: recipient={request.recipient}, length={len(request.text)}")
    await services.notifier.send_message(request.recipient, request.text)
    return SendMessageResponse(status="sent", recipient=request.recipient)
