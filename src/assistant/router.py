"""Routing of inbound messages to assistant capabilities."""

from __future__ import annotations

import logging
import random
import threading
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from src.ai import prompts
from src.ai.exceptions import InvalidPromptError
from src.ai.stability_client import prefer_enhanced_prompt, validate_prompt
from src.assistant import responses
from src.assistant.intents import (
    Command,
    Intent,
    ParsedCommand,
    classify_intent,
    extract_image_prompt,
    extract_reminder,
    parse_command,
    parse_translate_args,
)
from src.assistant.rate_limit import OperationClass
from src.exceptions import ProviderUnavailableError, RateLimitedError
from src.reminders.exceptions import (
    InvalidTimeError,
    ReminderNotFoundError,
    UnrecognizedReminderFormatError,
)
from src.reminders.models import ReminderStatus

if TYPE_CHECKING:
    from src.ai.base import ImageGenerator, TextGenerator
    from src.assistant.conversation import ConversationMemory
    from src.assistant.rate_limit import RateGovernor
    from src.messaging.base import Notifier
    from src.messaging.whatsapp.models import InboundMessage
    from src.reminders.store import ReminderStore

    CommandHandler = Callable[[InboundMessage, str, datetime], Awaitable[None]]

logger = logging.getLogger(__name__)

# Number of recent message ids remembered to drop transport retries
SEEN_MESSAGE_CAPACITY = 1000

IMAGE_PROMPT_MAX_TOKENS = 200
TRANSLATE_MIN_TOKENS = 200
STORY_MAX_TOKENS = 800


class CommandRouter:
    """Routes an inbound message to one capability and replies.

    Each message gets exactly one reply, except image generation which sends
    an acknowledgement followed by the image. Failures are turned into user
    facing replies and never propagate to the caller.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        notifier: Notifier,
        store: ReminderStore,
        text_generator: TextGenerator,
        image_generator: ImageGenerator,
        conversations: ConversationMemory,
        governor: RateGovernor,
        default_timezone: str = "UTC",
        started_at: datetime | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialise the router.

        :param notifier: Channel used for replies.
        :param store: Reminder store.
        :param text_generator: Text generation provider.
        :param image_generator: Image generation provider.
        :param conversations: Per-recipient chat history.
        :param governor: Rate governor.
        :param default_timezone: Timezone for reminders set over chat.
        :param started_at: Service start time, for uptime in /stats.
        :param rng: Random source for greeting selection.
        """
        self._notifier = notifier
        self._store = store
        self._text_generator = text_generator
        self._image_generator = image_generator
        self._conversations = conversations
        self._governor = governor
        self._timezone = default_timezone
        self._started_at = started_at or datetime.now(UTC)
        self._rng = rng or random.Random()
        self._seen_ids: OrderedDict[str, None] = OrderedDict()
        self._seen_lock = threading.Lock()

        self._commands: dict[Command, CommandHandler] = {
            Command.HELP: self._handle_help,
            Command.START: self._handle_start,
            Command.IMAGE: self._handle_image,
            Command.REMIND: self._handle_remind,
            Command.REMINDERS: self._handle_list_reminders,
            Command.CANCEL: self._handle_cancel,
            Command.CHAT: self._handle_chat,
            Command.TRANSLATE: self._handle_translate,
            Command.SUMMARIZE: self._handle_summarize,
            Command.JOKE: self._handle_joke,
            Command.STORY: self._handle_story,
            Command.CLEAR: self._handle_clear,
            Command.STATS: self._handle_stats,
        }

    async def handle_message(self, message: InboundMessage, now: datetime | None = None) -> None:
        """Handle one inbound message.

        :param message: The inbound message.
        :param now: Current time (defaults to now).
        """
        if now is None:
            now = datetime.now(UTC)

        if message.message_id and self._already_seen(message.message_id):
            logger.info(f"Ignoring duplicate message: message_id={message.message_id}")
            return

        logger.info(f"Processing message from {message.contact_name} ({message.sender})")

        if message.message_id:
            try:
                await self._notifier.mark_as_read(message.message_id)
            except Exception as e:
                logger.warning(f"Failed to mark message as read: {e}")

        try:
            self._governor.consume(message.sender, OperationClass.MESSAGE)
        except RateLimitedError as e:
            await self._reply(
                message.sender,
                responses.RATE_LIMITED_TEMPLATE.format(
                    retry_after=responses.format_duration(e.retry_after_seconds)
                ),
            )
            return

        try:
            parsed = parse_command(message.text)
            if parsed is not None:
                await self._handle_command(message, parsed, now)
            else:
                await self._handle_natural(message, now)
        except Exception as e:
            logger.exception(f"Error handling message from {message.sender}: {e}")
            await self._reply(message.sender, responses.GENERIC_ERROR)

    async def _handle_command(
        self,
        message: InboundMessage,
        parsed: ParsedCommand,
        now: datetime,
    ) -> None:
        if parsed.command is None:
            await self._reply(
                message.sender, responses.UNKNOWN_COMMAND_TEMPLATE.format(name=parsed.name)
            )
            return

        logger.debug(f"Handling command: /{parsed.command}, sender={message.sender}")
        await self._commands[parsed.command](message, parsed.args or "", now)

    async def _handle_natural(self, message: InboundMessage, now: datetime) -> None:
        intent = classify_intent(message.text)
        logger.debug(f"Classified message: intent={intent}, sender={message.sender}")

        if intent == Intent.IMAGE:
            description = extract_image_prompt(message.text)
            if not description:
                await self._reply(message.sender, responses.IMAGE_ASK_DESCRIPTION)
                return
            await self._generate_image(message.sender, description)
        elif intent == Intent.REMINDER:
            await self._create_reminder(
                message.sender, message.text, now, responses.REMINDER_NATURAL_HINT
            )
        elif intent == Intent.QUESTION:
            await self._answer_question(message, now)
        elif intent == Intent.GREETING:
            template = self._rng.choice(responses.GREETING_TEMPLATES)
            await self._reply(message.sender, template.format(name=message.contact_name))
        else:
            await self._chat(message.sender, message.text, now)

    # Commands

    async def _handle_help(self, message: InboundMessage, args: str, now: datetime) -> None:
        await self._reply(message.sender, responses.HELP_TEXT)

    async def _handle_start(self, message: InboundMessage, args: str, now: datetime) -> None:
        await self._reply(
            message.sender, responses.WELCOME_TEMPLATE.format(name=message.contact_name)
        )

    async def _handle_image(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.IMAGE_USAGE)
            return
        await self._generate_image(message.sender, args)

    async def _handle_remind(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.REMINDER_USAGE)
            return
        await self._create_reminder(message.sender, args, now, responses.REMINDER_FORMAT_HINT)

    async def _handle_list_reminders(
        self,
        message: InboundMessage,
        args: str,
        now: datetime,
    ) -> None:
        reminders = self._store.list(message.sender, status=ReminderStatus.ACTIVE)
        await self._reply(message.sender, responses.format_reminder_list(reminders))

    async def _handle_cancel(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.CANCEL_USAGE)
            return

        try:
            reminder = self._store.cancel(message.sender, args.split()[0], now=now)
        except ReminderNotFoundError:
            await self._reply(message.sender, responses.REMINDER_NOT_FOUND)
            return
        await self._reply(message.sender, responses.format_reminder_cancelled(reminder))

    async def _handle_chat(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.CHAT_USAGE)
            return
        await self._chat(message.sender, args, now)

    async def _handle_translate(self, message: InboundMessage, args: str, now: datetime) -> None:
        parsed = parse_translate_args(args) if args else None
        if parsed is None:
            await self._reply(message.sender, responses.TRANSLATE_USAGE)
            return

        text, language = parsed
        max_tokens = max(TRANSLATE_MIN_TOKENS, len(text) * 2)
        await self._complete_and_reply(
            message.sender,
            prompts.translate_prompt(text, language),
            lambda translation: responses.TRANSLATION_TEMPLATE.format(
                language=language, translation=translation
            ),
            max_tokens=max_tokens,
        )

    async def _handle_summarize(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.SUMMARIZE_USAGE)
            return
        await self._complete_and_reply(
            message.sender,
            prompts.summarize_prompt(args),
            lambda summary: responses.SUMMARY_TEMPLATE.format(summary=summary),
            max_tokens=300,
        )

    async def _handle_joke(self, message: InboundMessage, args: str, now: datetime) -> None:
        topic = args or "general"
        await self._complete_and_reply(
            message.sender,
            prompts.joke_prompt(topic),
            lambda joke: responses.JOKE_TEMPLATE.format(joke=joke),
        )

    async def _handle_story(self, message: InboundMessage, args: str, now: datetime) -> None:
        if not args:
            await self._reply(message.sender, responses.STORY_USAGE)
            return
        await self._complete_and_reply(
            message.sender,
            prompts.story_prompt(args),
            lambda story: responses.STORY_TEMPLATE.format(topic=args, story=story),
            max_tokens=STORY_MAX_TOKENS,
        )

    async def _handle_clear(self, message: InboundMessage, args: str, now: datetime) -> None:
        self._conversations.clear(message.sender)
        await self._reply(message.sender, responses.HISTORY_CLEARED)

    async def _handle_stats(self, message: InboundMessage, args: str, now: datetime) -> None:
        stats = self._store.stats()
        await self._reply(message.sender, responses.format_stats(stats, now - self._started_at))

    # Capabilities

    async def _create_reminder(
        self,
        sender: str,
        text: str,
        now: datetime,
        format_hint: str,
    ) -> None:
        local_now = now.astimezone(ZoneInfo(self._timezone))
        try:
            request = extract_reminder(text, local_now)
            reminder = self._store.create(
                sender,
                request.text,
                request.due_at,
                timezone=self._timezone,
                now=now,
            )
        except UnrecognizedReminderFormatError:
            await self._reply(sender, format_hint)
            return
        except (InvalidTimeError, ValueError) as e:
            logger.info(f"Rejected reminder time from {sender}: {e}")
            await self._reply(sender, responses.REMINDER_TIME_HINT)
            return

        await self._reply(sender, responses.format_reminder_set(reminder))

    async def _generate_image(self, sender: str, description: str) -> None:
        try:
            description = validate_prompt(description)
        except InvalidPromptError as e:
            logger.info(f"Rejected image prompt from {sender}: {e.reason}")
            await self._reply(sender, responses.IMAGE_REJECTED_TEMPLATE.format(reason=e.reason))
            return

        try:
            self._governor.consume(sender, OperationClass.IMAGE)
        except RateLimitedError as e:
            await self._reply(
                sender,
                responses.IMAGE_LIMIT_TEMPLATE.format(
                    retry_after=responses.format_duration(e.retry_after_seconds)
                ),
            )
            return

        await self._reply(sender, responses.IMAGE_GENERATING)

        try:
            enhanced = await self._text_generator.complete(
                prompts.image_prompt(description), max_tokens=IMAGE_PROMPT_MAX_TOKENS
            )
        except ProviderUnavailableError as e:
            logger.warning(f"Prompt enhancement failed, using raw description: {e}")
            enhanced = description

        try:
            image_url = await self._image_generator.render(
                prefer_enhanced_prompt(enhanced, description)
            )
        except InvalidPromptError as e:
            await self._reply(sender, responses.IMAGE_REJECTED_TEMPLATE.format(reason=e.reason))
            return
        except ProviderUnavailableError as e:
            logger.exception(f"Image generation failed for {sender}: {e}")
            await self._reply(sender, responses.IMAGE_FAILED)
            return

        caption = responses.IMAGE_CAPTION_TEMPLATE.format(description=description)
        try:
            await self._notifier.send_media(sender, image_url, caption)
        except Exception as e:
            logger.exception(f"Failed to send image to {sender}: {e}")

    async def _answer_question(self, message: InboundMessage, now: datetime) -> None:
        try:
            answer = await self._text_generator.complete(prompts.question_prompt(message.text))
        except ProviderUnavailableError as e:
            logger.warning(f"Question answering failed, falling back to chat: {e}")
            await self._chat(message.sender, message.text, now)
            return
        await self._reply(message.sender, answer)

    async def _chat(self, sender: str, text: str, now: datetime) -> None:
        turns = self._conversations.build_turns(sender, text, now)
        try:
            reply = await self._text_generator.chat(turns, prompts.CHAT_SYSTEM_PROMPT)
        except ProviderUnavailableError as e:
            logger.exception(f"Chat failed for {sender}: {e}")
            await self._reply(sender, responses.PROVIDER_FAILED)
            return

        self._conversations.record_exchange(sender, text, reply, now)
        await self._reply(sender, reply)

    async def _complete_and_reply(
        self,
        sender: str,
        prompt: str,
        render: Callable[[str], str],
        max_tokens: int = 500,
    ) -> None:
        try:
            result = await self._text_generator.complete(prompt, max_tokens=max_tokens)
        except ProviderUnavailableError as e:
            logger.exception(f"Text generation failed for {sender}: {e}")
            await self._reply(sender, responses.PROVIDER_FAILED)
            return
        await self._reply(sender, render(result))

    async def _reply(self, recipient: str, text: str) -> None:
        try:
            await self._notifier.send_message(recipient, text)
        except Exception as e:
            logger.exception(f"Failed to send reply to {recipient}: {e}")

    def _already_seen(self, message_id: str) -> bool:
        with self._seen_lock:
            if message_id in self._seen_ids:
                return True
            self._seen_ids[message_id] = None
            while len(self._seen_ids) > SEEN_MESSAGE_CAPACITY:
                self._seen_ids.popitem(last=False)
            return False
