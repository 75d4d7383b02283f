"""Reply texts sent to WhatsApp users."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import humanize

from src.reminders.models import Reminder, ReminderStoreStats

HELP_TEXT = """🤖 *WhatsApp AI Assistant* 🤖

*🎨 Image Generation:*
/image [description] - Generate an image
Example: /image sunset over mountains

*⏰ Reminders:*
/remind [message] at [time] - Set a reminder
/reminders - List your reminders
/cancel [reminder_id] - Cancel a reminder

*💬 AI Chat:*
/chat [message] - Chat with AI
/clear - Clear chat history

*🔧 Utilities:*
/translate [text] to [language] - Translate text
/summarize [text] - Summarize text
/joke [topic] - Get a joke
/story [topic] - Generate a story

*📊 Other:*
/stats - Bot statistics
/help - Show this help

*Natural Language Support:*
You can also use natural language like:
• "Generate an image of a cat"
• "Remind me to call mom at 3pm"
• "What is the weather like?"

Type any message to start chatting! 😊"""

WELCOME_TEMPLATE = """👋 Welcome to WhatsApp AI Assistant, {name}!

I'm your AI-powered assistant that can:
🎨 Generate amazing images
🧠 Have intelligent conversations
⏰ Set and manage reminders
🌍 Translate text
📝 Summarize content
😄 Tell jokes and create stories

Type /help to see all commands or just start chatting naturally!

What would you like to do today? ✨"""

GREETING_TEMPLATES = (
    "👋 Hello {name}! How can I help you today?",
    "Hi there! 😊 What would you like to do?",
    "Hey {name}! Ready for some AI magic? ✨",
    "Hello! I'm here to help with images, reminders, or just to chat! 🤖",
)

UNKNOWN_COMMAND_TEMPLATE = "❓ Unknown command: /{name}\n\nType /help to see available commands."

IMAGE_USAGE = (
    "🎨 Please provide a description for the image.\n\n"
    "Example: /image sunset over mountains with purple clouds"
)
IMAGE_ASK_DESCRIPTION = "🎨 What image would you like me to generate? Please describe it."
IMAGE_GENERATING = "🎨 Generating your image... This may take a few moments."
IMAGE_CAPTION_TEMPLATE = '🎨 Here\'s your generated image: "{description}"'
IMAGE_FAILED = (
    "⚠️ Sorry, I couldn't generate the image. Please try again with a different description."
)
IMAGE_REJECTED_TEMPLATE = "⚠️ I can't use that description: {reason}."
IMAGE_LIMIT_TEMPLATE = (
    "⏳ Daily image generation limit reached. Try again in {retry_after}."
)

REMINDER_USAGE = (
    "⏰ Please provide reminder details.\n\n"
    "Examples:\n"
    "• /remind Buy groceries at 5pm\n"
    "• /remind Call doctor tomorrow at 10am\n"
    "• /remind Meeting in 2 hours"
)
REMINDER_FORMAT_HINT = (
    "⚠️ I couldn't understand the reminder format. Please try:\n/remind [message] at [time]"
)
REMINDER_NATURAL_HINT = (
    "⏰ I understand you want to set a reminder. Please specify what and when.\n\n"
    'Example: "Remind me to call mom at 3pm"'
)
REMINDER_TIME_HINT = (
    "⚠️ I couldn't use that time. Make sure it is in the future, for example:\n"
    "• at 5pm\n"
    "• tomorrow at 10am\n"
    "• in 30 minutes\n"
    "• on 12/25/2030"
)
REMINDER_SET_TEMPLATE = (
    "✅ Reminder set!\n\n📝 Message: {text}\n⏰ Time: {time}\n🆔 ID: {short_id}"
)
NO_REMINDERS = "📅 You have no active reminders.\n\nSet one with: /remind [message] at [time]"
CANCEL_USAGE = "❌ Please provide the reminder ID.\n\nExample: /cancel 12345678"
REMINDER_NOT_FOUND = "❌ Reminder not found. Use /reminders to see your active reminders."
REMINDER_CANCELLED_TEMPLATE = (
    '✅ Reminder cancelled!\n\n📝 "{text}"\n⏰ Was scheduled for: {time}'
)

CHAT_USAGE = (
    "💬 Please provide a message to chat about.\n\n"
    "Example: /chat Tell me about artificial intelligence"
)
TRANSLATE_USAGE = (
    "🌍 Please use the format: /translate [text] to [language]\n\n"
    "Example: /translate Hello world to Spanish"
)
TRANSLATION_TEMPLATE = "🌍 *Translation to {language}:*\n\n{translation}"
SUMMARIZE_USAGE = (
    "📝 Please provide text to summarize.\n\nExample: /summarize [your long text here]"
)
SUMMARY_TEMPLATE = "📝 *Summary:*\n\n{summary}"
JOKE_TEMPLATE = "😄 {joke}"
STORY_USAGE = "📚 Please provide a topic for the story.\n\nExample: /story space adventure"
STORY_TEMPLATE = "📚 *Story: {topic}*\n\n{story}"
HISTORY_CLEARED = "🧹 Your conversation history has been cleared. We can start fresh!"

RATE_LIMITED_TEMPLATE = "⏳ You're sending messages too quickly. Please wait {retry_after}."
PROVIDER_FAILED = (
    "⚠️ Sorry, I'm having trouble responding right now. "
    "Please try again or use /help for commands."
)
GENERIC_ERROR = (
    "⚠️ Sorry, I encountered an error. Please try again or type /help for available commands."
)

STATS_TEMPLATE = """📊 *Bot Statistics:*

⏰ *Reminders:*
• Total: {total}
• Active: {active}
• Completed: {sent}
• Users with reminders: {recipients}

🤖 *Bot Status:* Online ✅
⏱️ *Uptime:* {uptime}"""


def format_local_time(moment: datetime, timezone: str, fmt: str = "%Y-%m-%d %H:%M") -> str:
    """Format a datetime in the given timezone."""
    return moment.astimezone(ZoneInfo(timezone)).strftime(fmt)


def format_duration(seconds: float) -> str:
    """Format a duration as a human string ("2 hours and 5 minutes").

    :param seconds: Duration in seconds, negative values count as zero.
    :returns: Human readable duration.
    """
    return humanize.precisedelta(timedelta(seconds=max(0, int(seconds))))


def format_reminder_set(reminder: Reminder) -> str:
    """Confirmation for a newly created reminder."""
    return REMINDER_SET_TEMPLATE.format(
        text=reminder.text,
        time=format_local_time(reminder.due_at, reminder.timezone),
        short_id=reminder.short_id,
    )


def format_reminder_cancelled(reminder: Reminder) -> str:
    """Confirmation for a cancelled reminder."""
    return REMINDER_CANCELLED_TEMPLATE.format(
        text=reminder.text,
        time=format_local_time(reminder.due_at, reminder.timezone, "%b %d, %Y %H:%M"),
    )


def format_reminder_list(reminders: list[Reminder]) -> str:
    """List of a user's active reminders.

    :param reminders: Reminders sorted by due time.
    :returns: Message text, or the empty-list hint.
    """
    if not reminders:
        return NO_REMINDERS

    lines = ["📅 *Your Active Reminders:*\n"]
    for index, reminder in enumerate(reminders, start=1):
        time = format_local_time(reminder.due_at, reminder.timezone, "%b %d, %Y %H:%M")
        recurrence = f" 🔁 {reminder.recurrence}" if reminder.is_recurring else ""
        lines.append(
            f"{index}. 📝 {reminder.text}\n⏰ {time}{recurrence}\n🆔 {reminder.short_id}\n"
        )
    lines.append("To cancel a reminder, use: /cancel [ID]")
    return "\n".join(lines)


def format_stats(stats: ReminderStoreStats, uptime: timedelta) -> str:
    """Reminder statistics and uptime."""
    return STATS_TEMPLATE.format(
        total=stats.total,
        active=stats.active,
        sent=stats.sent,
        recipients=stats.recipient_count,
        uptime=format_duration(uptime.total_seconds()),
    )
