"""Construction of the long-lived assistant components."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.ai.base import ImageGenerator, TextGenerator
from src.ai.bedrock_client import BedrockClient
from src.ai.media import MediaStore
from src.ai.stability_client import StabilityClient
from src.ai.utils.config import get_stability_settings
from src.assistant.conversation import ConversationMemory
from src.assistant.rate_limit import RateGovernor
from src.assistant.router import CommandRouter
from src.assistant.utils.config import AssistantConfig, get_assistant_settings
from src.messaging.base import Notifier
from src.messaging.whatsapp.client import WhatsAppClient
from src.messaging.whatsapp.notifier import WhatsAppNotifier
from src.messaging.whatsapp.utils.config import get_whatsapp_settings
from src.reminders.dispatcher import ReminderDispatcher
from src.reminders.poller import ReminderPoller
from src.reminders.store import ReminderStore

logger = logging.getLogger(__name__)


@dataclass
class AssistantServices:
    """Every component shared by the HTTP surface and the background poller."""

    config: AssistantConfig
    store: ReminderStore
    notifier: Notifier
    text_generator: TextGenerator
    image_generator: ImageGenerator
    media_store: MediaStore
    conversations: ConversationMemory
    governor: RateGovernor
    dispatcher: ReminderDispatcher
    poller: ReminderPoller
    router: CommandRouter
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def build_services(  # noqa: PLR0913
    config: AssistantConfig | None = None,
    *,
    notifier: Notifier | None = None,
    text_generator: TextGenerator | None = None,
    image_generator: ImageGenerator | None = None,
    media_store: MediaStore | None = None,
    store: ReminderStore | None = None,
    governor: RateGovernor | None = None,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> AssistantServices:
    """Wire up the assistant.

    Components not passed in are created from environment settings.

    :param config: Assistant settings (defaults to environment).
    :param notifier: Outbound channel (defaults to WhatsApp via SendPulse).
    :param text_generator: Text provider (defaults to Bedrock).
    :param image_generator: Image provider (defaults to Stability AI).
    :param media_store: Store for generated images.
    :param store: Reminder store.
    :param governor: Rate governor (defaults to configured limits).
    :param rng: Random source for greetings.
    :param now: Service start time (defaults to now).
    :returns: The wired services.
    """
    config = config or get_assistant_settings()
    started_at = now or datetime.now(UTC)

    if notifier is None:
        whatsapp_settings = get_whatsapp_settings()
        notifier = WhatsAppNotifier(
            WhatsAppClient(
                user_id=whatsapp_settings.user_id,
                secret=whatsapp_settings.secret,
                base_url=whatsapp_settings.base_url,
                request_timeout=whatsapp_settings.request_timeout,
                token_refresh_margin=whatsapp_settings.token_refresh_margin,
            )
        )

    if media_store is None:
        media_store = MediaStore(config.public_base_url)
    if text_generator is None:
        text_generator = BedrockClient(model_id=config.chat_model)
    if image_generator is None:
        image_generator = StabilityClient(get_stability_settings(), media_store)
    if store is None:
        store = ReminderStore()
    if governor is None:
        governor = RateGovernor.from_config(config)
    conversations = ConversationMemory(
        max_exchanges=config.history_max_exchanges,
        max_idle=config.history_max_idle,
    )

    dispatcher = ReminderDispatcher(store, notifier, grace_window=config.grace_window)
    poller = ReminderPoller(
        dispatcher,
        store,
        interval=config.poll_interval,
        cleanup_interval=config.cleanup_interval,
        retention=config.retention,
        extra_cleanups=[conversations.cleanup],
    )
    router = CommandRouter(
        notifier=notifier,
        store=store,
        text_generator=text_generator,
        image_generator=image_generator,
        conversations=conversations,
        governor=governor,
        default_timezone=config.default_timezone,
        started_at=started_at,
        rng=rng,
    )

    logger.info(
        f"Assistant services built: model={config.chat_model}, "
        f"timezone={config.default_timezone}, poller={config.run_reminder_poller}"
    )
    return AssistantServices(
        config=config,
        store=store,
        notifier=notifier,
        text_generator=text_generator,
        image_generator=image_generator,
        media_store=media_store,
        conversations=conversations,
        governor=governor,
        dispatcher=dispatcher,
        poller=poller,
        router=router,
        started_at=started_at,
    )
