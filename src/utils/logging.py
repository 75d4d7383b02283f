"""Logging configuration for the application.

Everything goes to stdout through a single root handler. WhatsApp phone
numbers appear in most log lines, so the handler masks them unless
redaction is switched off.
"""

import logging
import os
import re
import sys
from collections.abc import Iterable

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Digits left visible at the end of a masked phone number
VISIBLE_PHONE_DIGITS = 4

# E.164-length digit runs not embedded in ids or other words
_PHONE_NUMBER = re.compile(r"(?<![\w.-])\+?\d{8,15}(?![\w-])")

# Loggers of chatty client libraries, kept at INFO or above
_LIBRARY_LOGGERS = ("urllib3", "httpx", "botocore", "boto3", "sentry_sdk")


def _parse_level(level: str) -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    return numeric_level


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _set_logger_levels(names: Iterable[str], level: int) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)


def mask_phone_number(match: re.Match[str]) -> str:
    """Replace all but the last few digits of a matched phone number."""
    number = match.group(0)
    digits = number.lstrip("+")
    hidden = len(digits) - VISIBLE_PHONE_DIGITS
    return number[: len(number) - len(digits)] + "*" * hidden + digits[hidden:]


def redact_phone_numbers(text: str) -> str:
    """Mask every phone number in the given text."""
    return _PHONE_NUMBER.sub(mask_phone_number, text)


class PhoneNumberRedactor(logging.Filter):
    """Mask phone numbers in formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record message with phone numbers masked.

        :param record: The record being handled.
        :returns: Always True, records are never dropped.
        """
        message = record.getMessage()
        redacted = redact_phone_numbers(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def configure_logging() -> None:
    """Configure application-wide logging to stdout only.

    Env vars:
      - LOG_LEVEL: DEBUG/INFO/WARNING/ERROR/CRITICAL (default INFO)
      - LOG_UVICORN_ACCESS: true/false (default false)
      - LOG_REDACT_PHONE_NUMBERS: true/false (default true)
    """
    level_name = os.environ.get("LOG_LEVEL", "INFO")
    level = _parse_level(level_name)
    redact = _env_flag("LOG_REDACT_PHONE_NUMBERS", default=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    if redact:
        handler.addFilter(PhoneNumberRedactor())
    root_logger.addHandler(handler)

    # uvicorn attaches its own handlers; route everything through the root one
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    if not _env_flag("LOG_UVICORN_ACCESS", default=False):
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _set_logger_levels(_LIBRARY_LOGGERS, level=max(level, logging.INFO))

    logging.getLogger(__name__).info(
        f"Logging configured: level={level_name.upper()}, redact_phone_numbers={redact}"
    )
