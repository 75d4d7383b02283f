"""Natural language time parsing for reminders.

Converts free-text phrases such as "tomorrow at 3pm", "in 5 minutes",
"at 14:30" or "12/25/2024" into absolute, timezone-aware datetimes. The
reference time is always passed in so parsing is deterministic.
"""

import logging
import re
from datetime import UTC, datetime, timedelta

from dateutil import parser as dateparser

from src.reminders.exceptions import UnparseableTimeError

logger = logging.getLogger(__name__)

TOMORROW_PATTERN = re.compile(r"\btomorrow\b")

# First clock time anywhere in the text, e.g. "3pm", "10:30", "9:15 am"
CLOCK_PATTERN = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?\b")

# "in 5 minutes", "in 2 hours"; a bare "5 minutes" is accepted as well
RELATIVE_PATTERN = re.compile(r"(?:^|\bin\s+)(\d+)\s*(minute|hour|day)s?\b")

# "at 14:30", "at 3pm"; a bare "3pm" or "14:30" is accepted as well
AT_TIME_PATTERN = re.compile(r"(?:^|\bat\s+)(\d{1,2})(?::(\d{2}))?\s*(am|pm)?(?=\s|$)")

# US style calendar date: MM/DD/YYYY
DATE_PATTERN = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")

_RELATIVE_UNITS = {
    "minute": "minutes",
    "hour": "hours",
    "day": "days",
}


def to_24_hour(hour: int, meridiem: str | None) -> int:
    """Convert a 12-hour clock hour to 24-hour.

    12am becomes 0, any hour below 12 with pm gains 12, everything else is
    returned unchanged.

    :param hour: Hour as written by the user.
    :param meridiem: "am", "pm" or None.
    :returns: Hour on a 24-hour clock.
    """
    if meridiem == "am" and hour == 12:
        return 0
    if meridiem == "pm" and hour < 12:
        return hour + 12
    return hour


def _at_clock_time(
    day: datetime,
    expression: str,
    hour: int,
    minute: int,
    meridiem: str | None,
) -> datetime:
    hour_24 = to_24_hour(hour, meridiem)
    try:
        return day.replace(hour=hour_24, minute=minute, second=0, microsecond=0)
    except ValueError as e:
        raise UnparseableTimeError(expression) from e


def _parse_tomorrow(text: str, now: datetime) -> datetime | None:
    if not TOMORROW_PATTERN.search(text):
        return None

    match = CLOCK_PATTERN.search(text)
    if match is None:
        return None

    hour, minute, meridiem = match.groups()
    try:
        tomorrow = now + timedelta(days=1)
    except OverflowError as e:
        raise UnparseableTimeError(text) from e
    return _at_clock_time(
        tomorrow,
        text,
        int(hour),
        int(minute) if minute else 0,
        meridiem,
    )


def _parse_relative(text: str, now: datetime) -> datetime | None:
    match = RELATIVE_PATTERN.search(text)
    if match is None:
        return None

    amount, unit = match.groups()
    try:
        delta = timedelta(**{_RELATIVE_UNITS[unit]: int(amount)})
        if unit == "day":
            # Days keep the wall-clock time across DST changes
            return now + delta
        # Minutes and hours are elapsed time, so add them in UTC
        return (now.astimezone(UTC) + delta).astimezone(now.tzinfo)
    except (ValueError, OverflowError) as e:
        raise UnparseableTimeError(text) from e


def _parse_at_time(text: str, now: datetime) -> datetime | None:
    match = AT_TIME_PATTERN.search(text)
    if match is None:
        return None

    hour, minute, meridiem = match.groups()
    # A lone number ("at 5") is too ambiguous to be a clock time
    if minute is None and meridiem is None:
        return None

    target = _at_clock_time(now, text, int(hour), int(minute) if minute else 0, meridiem)
    if target < now:
        try:
            target += timedelta(days=1)
        except OverflowError as e:
            raise UnparseableTimeError(text) from e
    return target


def _parse_date(text: str, now: datetime) -> datetime | None:
    match = DATE_PATTERN.search(text)
    if match is None:
        return None

    month, day, year = (int(part) for part in match.groups())
    try:
        return now.replace(
            year=year,
            month=month,
            day=day,
            hour=0,
            minute=0,
            second=0,
            microsecond=0,
        )
    except ValueError as e:
        raise UnparseableTimeError(text) from e


def _parse_generic(text: str, now: datetime) -> datetime:
    default = now.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        parsed = dateparser.parse(text, default=default)
    except (ValueError, OverflowError) as e:
        raise UnparseableTimeError(text) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=now.tzinfo)
    return parsed


def parse_time_expression(text: str, now: datetime) -> datetime:
    """Parse a free-text time expression into an absolute datetime.

    Forms are tried in order and the first match wins:

    1. ``tomorrow [at] H[:MM][am|pm]``
    2. ``in N minutes|hours|days``
    3. ``at H:MM[am|pm]`` (today, rolled to tomorrow when already past)
    4. ``MM/DD/YYYY`` (midnight)
    5. Anything python-dateutil understands

    :param text: The time expression.
    :param now: Reference time, must be timezone-aware.
    :returns: Timezone-aware datetime in the same zone as ``now``.
    :raises UnparseableTimeError: If no form matches.
    :raises ValueError: If ``now`` is naive.
    """
    if now.tzinfo is None:
        raise ValueError("Reference time must be timezone-aware")

    normalised = " ".join(text.lower().split())
    if not normalised:
        raise UnparseableTimeError(text)

    for form in (_parse_tomorrow, _parse_relative, _parse_at_time, _parse_date):
        result = form(normalised, now)
        if result is not None:
            logger.debug(f"Parsed time expression: text={text!r}, form={form.__name__}")
            return result

    result = _parse_generic(normalised, now)
    logger.debug(f"Parsed time expression with dateutil: text={text!r}, result={result}")
    return result
