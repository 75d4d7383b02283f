"""FastAPI application configuration."""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from datetime import UTC, datetime

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.dependencies import api_rate_limit, verify_token
from src.api.health import router as health_router
from src.api.images import router as images_router
from src.api.media import router as media_router
from src.api.messages import router as messages_router
from src.api.models import ErrorResponse, RateLimitedResponse
from src.api.reminders import router as reminders_router
from src.api.stats import router as stats_router
from src.api.webhooks import router as webhooks_router
from src.assistant.services import AssistantServices, build_services
from src.exceptions import ProviderUnavailableError, RateLimitedError
from src.observability.sentry import init_sentry
from src.paths import ENV_FILE
from src.reminders.exceptions import ReminderError, ReminderNotFoundError
from src.utils.logging import configure_logging

load_dotenv(ENV_FILE)
configure_logging()
init_sentry()

logger = logging.getLogger(__name__)

API_VERSION = "0.1.0"


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=detail).model_dump())


async def _handle_bad_request(request: Request, exc: Exception) -> JSONResponse:
    logger.info(f"Rejected request: path={request.url.path}, error={exc}")
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


async def _handle_not_found(request: Request, exc: Exception) -> JSONResponse:
    logger.info(f"Not found: path={request.url.path}, error={exc}")
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


async def _handle_provider_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Provider call failed: path={request.url.path}")
    return _error(status.HTTP_502_BAD_GATEWAY, f"Upstream provider unavailable: {exc}")


async def _handle_rate_limited(request: Request, exc: Exception) -> JSONResponse:
    retry_after = exc.retry_after_seconds if isinstance(exc, RateLimitedError) else 60
    logger.warning(f"Rate limited: path={request.url.path}, retry_after={retry_after}s")
    body = RateLimitedResponse(detail="Too many requests", retry_after_seconds=retry_after)
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=body.model_dump(),
        headers={"Retry-After": str(retry_after)},
    )


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Build services if needed and run the reminder poller while the app is up."""
    if getattr(application.state, "services", None) is None:
        application.state.services = build_services()
    services: AssistantServices = application.state.services
    application.state.started_at = services.started_at

    poller_task: asyncio.Task[None] | None = None
    if services.config.run_reminder_poller:
        poller_task = asyncio.create_task(services.poller.run())
    else:
        logger.info("Internal reminder poller disabled, relying on POST /reminders/tick")

    try:
        yield
    finally:
        if poller_task is not None:
            services.poller.stop()
            poller_task.cancel()
            with suppress(asyncio.CancelledError):
                await poller_task
        logger.info("FastAPI application shut down")


def create_app(services: AssistantServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    When services are not given they are built from environment settings on
    startup, and the reminder poller runs for the lifetime of the app.

    :param services: Pre-built assistant services (mainly for tests).
    :returns: Configured FastAPI application instance.
    """
    application = FastAPI(
        title="WhatsApp AI Assistant API",
        version=API_VERSION,
        lifespan=lifespan,
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorised"},
            429: {"model": RateLimitedResponse, "description": "Too many requests"},
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )
    application.state.services = services
    application.state.started_at = services.started_at if services else datetime.now(UTC)

    # Most specific handler wins, so not found maps to 404 before ReminderError's 400
    application.add_exception_handler(ReminderNotFoundError, _handle_not_found)
    application.add_exception_handler(ReminderError, _handle_bad_request)
    application.add_exception_handler(ValueError, _handle_bad_request)
    application.add_exception_handler(ProviderUnavailableError, _handle_provider_unavailable)
    application.add_exception_handler(RateLimitedError, _handle_rate_limited)

    # Public routes
    application.include_router(health_router)
    application.include_router(media_router)
    application.include_router(webhooks_router)

    # Admin routes
    admin_dependencies = [Depends(verify_token), Depends(api_rate_limit)]
    application.include_router(reminders_router, dependencies=admin_dependencies)
    application.include_router(images_router, dependencies=admin_dependencies)
    application.include_router(messages_router, dependencies=admin_dependencies)
    application.include_router(stats_router, dependencies=admin_dependencies)

    logger.info("FastAPI application created")

    return application


# Application instance for uvicorn
app = create_app()


def main() -> None:
    """Entry point for running the API server with uvicorn."""
    uvicorn.run(
        "src.api.app:app",
        host=os.environ.get("API_HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.environ.get("API_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
