"""Shared test fixtures for API tests.

Services are built with mocked providers so no test touches SendPulse,
Bedrock or Stability AI, and the internal poller never starts.
"""

import os

# Set required environment variables before importing API modules
os.environ.setdefault("API_AUTH_TOKEN", "test-auth-token")

from unittest.mock import AsyncMock, MagicMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.ai.base import ImageGenerator, TextGenerator
from src.ai.media import MediaStore
from src.api.app import create_app
from src.assistant.rate_limit import OperationClass, RateGovernor, RateLimit
from src.assistant.services import AssistantServices, build_services
from src.assistant.utils.config import AssistantConfig
from src.messaging.base import Notifier

AUTH_HEADERS = {"Authorization": f"Bearer {os.environ['API_AUTH_TOKEN']}"}

TEST_BASE_URL = "http://testserver"


def build_test_services(
    governor: RateGovernor | None = None,
    **config_overrides: object,
) -> AssistantServices:
    """Build assistant services with mocked providers.

    :param governor: Rate governor to use (defaults to configured limits).
    :param config_overrides: AssistantConfig field overrides.
    :returns: Services whose notifier and generators are mocks.
    """
    config_overrides.setdefault("run_reminder_poller", False)
    config = AssistantConfig(
        public_base_url=TEST_BASE_URL,
        _env_file=None,
        **config_overrides,
    )

    notifier = MagicMock(spec=Notifier)
    notifier.send_message = AsyncMock()
    notifier.send_media = AsyncMock()
    notifier.mark_as_read = AsyncMock()

    text_generator = MagicMock(spec=TextGenerator)
    text_generator.complete = AsyncMock(return_value="generated text")
    text_generator.chat = AsyncMock(return_value="chat reply")

    image_generator = MagicMock(spec=ImageGenerator)
    image_generator.render = AsyncMock(return_value=f"{TEST_BASE_URL}/media/abc123")

    return build_services(
        config,
        notifier=notifier,
        text_generator=text_generator,
        image_generator=image_generator,
        media_store=MediaStore(TEST_BASE_URL),
        governor=governor,
    )


def build_test_client(services: AssistantServices) -> tuple[FastAPI, TestClient]:
    """Create an app around the given services and a client for it.

    The client is not entered as a context manager, so the lifespan (and with
    it the reminder poller) never runs.

    :param services: Services to attach to the app.
    :returns: The app and its test client.
    """
    app = create_app(services)
    return app, TestClient(app)


def single_limit_governor(operation: OperationClass, points: int) -> RateGovernor:
    """Create a governor that only limits one operation class.

    :param operation: The limited operation class.
    :param points: Allowed operations per minute.
    :returns: A new governor.
    """
    return RateGovernor({operation: RateLimit(points, 60)})
