"""SendPulse WhatsApp API client for sending messages."""

import logging
import re
import time
from collections.abc import Callable
from typing import Any

import requests

from src.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sendpulse.com"

# Default API timeout in seconds
DEFAULT_REQUEST_TIMEOUT = 30

# Renew the access token this many seconds before it expires
DEFAULT_TOKEN_REFRESH_MARGIN = 60

# Length of a national number that is missing its country code
_NATIONAL_NUMBER_LENGTH = 10
_DEFAULT_COUNTRY_CODE = "1"

_NON_DIGITS = re.compile(r"\D")


class WhatsAppClientError(ProviderUnavailableError):
    """Raised when a SendPulse API request fails."""

    pass


def format_phone(phone: str) -> str:
    """Normalise a phone number for the SendPulse API.

    Strips everything but digits. A 10 digit number without a leading 1 is
    assumed to be a US number and gets the +1 country code.

    :param phone: Phone number in any common notation.
    :returns: Digits-only phone number.
    """
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == _NATIONAL_NUMBER_LENGTH and not digits.startswith(_DEFAULT_COUNTRY_CODE):
        digits = _DEFAULT_COUNTRY_CODE + digits
    return digits


class WhatsAppClient:
    """Client for the SendPulse WhatsApp API.

    Authenticates with OAuth client credentials and caches the access token
    until shortly before it expires.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        user_id: str,
        secret: str,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: int = DEFAULT_REQUEST_TIMEOUT,
        token_refresh_margin: int = DEFAULT_TOKEN_REFRESH_MARGIN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise the WhatsApp client.

        :param user_id: SendPulse API client id.
        :param secret: SendPulse API client secret.
        :param base_url: SendPulse API base URL.
        :param request_timeout: Timeout in seconds for each request.
        :param token_refresh_margin: Seconds before expiry to renew the token.
        :param clock: Monotonic clock used for token expiry.
        """
        self._user_id = user_id
        self._secret = secret
        self._base_url = base_url.rstrip("/")
        self._request_timeout = request_timeout
        self._token_refresh_margin = token_refresh_margin
        self._clock = clock
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        logger.debug(f"WhatsAppClient initialised with request_timeout={request_timeout}s")

    def send_message(self, phone: str, text: str) -> dict[str, Any]:
        """Send a text message.

        :param phone: Recipient phone number.
        :param text: Message text.
        :returns: Raw API response.
        :raises WhatsAppClientError: If the API request fails.
        """
        payload = {"phones": [format_phone(phone)], "body": text}
        result = self._post("/whatsapp/contacts/sendByPhones", payload)
        logger.info(f"Message sent to {phone}: {text[:50]!r}")
        return result

    def send_image(self, phone: str, image_url: str, caption: str = "") -> dict[str, Any]:
        """Send an image by URL.

        :param phone: Recipient phone number.
        :param image_url: Publicly reachable image URL.
        :param caption: Caption shown with the image.
        :returns: Raw API response.
        :raises WhatsAppClientError: If the API request fails.
        """
        payload = {
            "phones": [format_phone(phone)],
            "body": caption,
            "media": {"type": "image", "url": image_url},
        }
        result = self._post("/whatsapp/contacts/sendByPhones", payload)
        logger.info(f"Image sent to {phone}: {image_url}")
        return result

    def mark_as_read(self, message_id: str) -> None:
        """Mark an inbound message as read.

        :param message_id: SendPulse message id.
        :raises WhatsAppClientError: If the API request fails.
        """
        self._post(f"/whatsapp/messages/{message_id}/read", {})
        logger.debug(f"Message marked as read: {message_id}")

    def get_access_token(self) -> str:
        """Get a valid access token, requesting a new one when needed.

        :returns: OAuth access token.
        :raises WhatsAppClientError: If authentication fails.
        """
        if self._access_token and self._clock() < self._token_expires_at:
            return self._access_token

        url = f"{self._base_url}/oauth/access_token"
        payload = {
            "grant_type": "client_credentials",
            "client_id": self._user_id,
            "client_secret": self._secret,
        }

        try:
            response = requests.post(url, json=payload, timeout=self._request_timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise WhatsAppClientError(
                f"SendPulse authentication timed out after {self._request_timeout}s"
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise WhatsAppClientError(f"SendPulse authentication failed: {e}") from e

        token = data.get("access_token")
        if not token:
            raise WhatsAppClientError("SendPulse authentication returned no access token")

        expires_in = int(data.get("expires_in", 0))
        self._access_token = token
        self._token_expires_at = self._clock() + expires_in - self._token_refresh_margin
        logger.info("SendPulse access token obtained")
        return token

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Make an authenticated POST request.

        :param path: API path relative to the base URL.
        :param payload: JSON body.
        :returns: Decoded JSON response (empty dict for an empty body).
        :raises WhatsAppClientError: If the request fails.
        """
        token = self.get_access_token()
        url = f"{self._base_url}{path}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                url,
                json=payload,
                headers=headers,
                timeout=self._request_timeout,
            )
            if response.status_code == requests.codes.unauthorized:
                # Token revoked early, force a new one on the next call
                self._access_token = None
            response.raise_for_status()
            return response.json() if response.content else {}
        except requests.exceptions.Timeout as e:
            raise WhatsAppClientError(
                f"SendPulse request timed out after {self._request_timeout}s: path={path}"
            ) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise WhatsAppClientError(f"SendPulse request failed: path={path}, error={e}") from e
