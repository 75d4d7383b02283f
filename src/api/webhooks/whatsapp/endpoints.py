"""SendPulse WhatsApp webhook endpoint."""

import logging
import time

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from src.api.dependencies import get_client_ip, get_services
from src.api.webhooks.whatsapp.models import WebhookResponse, WebhookStatus
from src.assistant.rate_limit import OperationClass
from src.assistant.services import AssistantServices
from src.exceptions import RateLimitedError
from src.messaging.whatsapp.models import parse_webhook_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/whatsapp")


@router.post(
    "",
    response_model=WebhookResponse,
    summary="Receive WhatsApp messages",
    description=(
        "Receives SendPulse webhook events and queues each text message for handling. "
        "Always acknowledges with 200, including for malformed or rate limited deliveries."
    ),
)
async def receive_whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    services: AssistantServices = Depends(get_services),
) -> WebhookResponse:
    """Receive and queue inbound WhatsApp messages.

    :param request: The incoming request.
    :param background_tasks: Tasks run after the response is sent.
    :param services: Shared assistant services.
    :returns: Acknowledgement for the transport.
    """
    start = time.perf_counter()
    client_ip = get_client_ip(request)

    try:
        services.governor.consume(client_ip, OperationClass.API)
    except RateLimitedError as e:
        logger.warning(
            f"Webhook rate limited: ip={client_ip}, retry_after={e.retry_after_seconds}s"
        )
        return WebhookResponse(status=WebhookStatus.RATE_LIMITED)

    try:
        payload = await request.json()
    except ValueError:
        logger.warning(f"Ignoring webhook with invalid JSON body: ip={client_ip}")
        return WebhookResponse(status=WebhookStatus.IGNORED)

    messages = parse_webhook_payload(payload)
    if not messages:
        logger.info(f"Ignoring webhook without text messages: ip={client_ip}")
        return WebhookResponse(status=WebhookStatus.IGNORED)

    for message in messages:
        background_tasks.add_task(services.router.handle_message, message)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Webhook accepted: messages={len(messages)}, elapsed={elapsed_ms:.0f}ms")
    return WebhookResponse(status=WebhookStatus.SUCCESS, processed=len(messages))
