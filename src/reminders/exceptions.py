"""Custom exceptions for the reminders module."""


class ReminderError(Exception):
    """Base exception for reminder-related errors."""


class InvalidTimeError(ReminderError):
    """Raised when a reminder time is unparseable or not in the future."""


class UnparseableTimeError(InvalidTimeError):
    """Raised when a free-text time expression cannot be understood."""

    def __init__(self, expression: str) -> None:
        """Initialise UnparseableTimeError.

        :param expression: The time expression that failed to parse.
        """
        self.expression = expression
        super().__init__(f"Could not understand the time: {expression!r}")


class UnrecognizedReminderFormatError(ReminderError):
    """Raised when a reminder message and time cannot be extracted from text."""

    def __init__(self, text: str) -> None:
        """Initialise UnrecognizedReminderFormatError.

        :param text: The text that could not be split into message and time.
        """
        self.text = text
        super().__init__(f"Unrecognised reminder format: {text!r}")


class ReminderNotFoundError(ReminderError):
    """Raised when a reminder cannot be found for a recipient."""

    def __init__(self, recipient: str, reminder_id: str, reason: str = "not found") -> None:
        """Initialise ReminderNotFoundError.

        :param recipient: Recipient the lookup was scoped to.
        :param reminder_id: The id or id prefix that was looked up.
        :param reason: Why the lookup failed.
        """
        self.recipient = recipient
        self.reminder_id = reminder_id
        super().__init__(f"Reminder {reminder_id!r} {reason} for recipient {recipient}")
