"""Sentry error reporting for the assistant API."""

import logging
import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from src.utils.logging import redact_phone_numbers


def scrub_event(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Mask recipient phone numbers in event messages before they leave the process.

    :param event: The Sentry event.
    :param hint: Sentry event hint (unused).
    :returns: The scrubbed event.
    """
    logentry = event.get("logentry")
    if logentry:
        for key in ("message", "formatted"):
            if isinstance(logentry.get(key), str):
                logentry[key] = redact_phone_numbers(logentry[key])
        # Formatted messages are already redacted, the raw params are not needed
        logentry.pop("params", None)

    if isinstance(event.get("message"), str):
        event["message"] = redact_phone_numbers(event["message"])

    for exception in event.get("exception", {}).get("values", []):
        if isinstance(exception.get("value"), str):
            exception["value"] = redact_phone_numbers(exception["value"])

    return event


def init_sentry() -> bool:
    """Initialise Sentry when SENTRY_DSN is configured.

    :returns: True if Sentry was initialised.
    """
    dsn = os.environ.get("SENTRY_DSN")
    if not dsn:
        return False

    # ERROR logs become events, INFO+ stay as breadcrumbs
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        environment=os.environ.get("APP_ENV", "local"),
        send_default_pii=False,
        before_send=scrub_event,
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
    )
    return True
