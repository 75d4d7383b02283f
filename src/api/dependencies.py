"""Shared dependencies for API endpoints."""

import logging
import os

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.assistant.rate_limit import OperationClass
from src.assistant.services import AssistantServices

logger = logging.getLogger(__name__)

security = HTTPBearer()

UNKNOWN_CLIENT = "unknown"


def get_api_token() -> str:
    """Retrieve the API authentication token from environment.

    :returns: The configured API token.
    :raises ValueError: If API_AUTH_TOKEN is not set.
    """
    token = os.environ.get("API_AUTH_TOKEN")
    if not token:
        raise ValueError(
            "API authentication token not configured. Set API_AUTH_TOKEN environment variable."
        )
    return token


def verify_token(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> str:
    """Verify the Bearer token from request headers.

    :param credentials: The HTTP Authorisation credentials.
    :returns: The validated token.
    :raises HTTPException: If token is invalid or missing.
    """
    try:
        expected_token = get_api_token()
    except ValueError as e:
        logger.error(f"API token configuration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        ) from e

    if credentials.credentials != expected_token:
        logger.warning("Invalid API token provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return credentials.credentials


def get_services(request: Request) -> AssistantServices:
    """Get the assistant services attached to the application.

    :param request: The incoming request.
    :returns: The shared services.
    :raises HTTPException: If the application has not finished starting up.
    """
    services: AssistantServices | None = getattr(request.app.state, "services", None)
    if services is None:
        logger.error("Assistant services requested before startup completed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return services


def get_client_ip(request: Request) -> str:
    """Get the client address, honouring the first X-Forwarded-For hop.

    :param request: The incoming request.
    :returns: Client IP, or "unknown" when it cannot be determined.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is not None:
        return request.client.host
    return UNKNOWN_CLIENT


def api_rate_limit(
    request: Request,
    services: AssistantServices = Depends(get_services),
) -> None:
    """Apply the general per-IP request limit.

    :raises RateLimitedError: If the client is over its limit.
    """
    services.governor.consume(get_client_ip(request), OperationClass.API)


def strict_rate_limit(
    request: Request,
    services: AssistantServices = Depends(get_services),
) -> None:
    """Apply the per-IP limit for expensive operations.

    :raises RateLimitedError: If the client is over its limit.
    """
    services.governor.consume(get_client_ip(request), OperationClass.STRICT)
