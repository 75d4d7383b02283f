"""In-memory store for generated media served over HTTP."""

import logging
import threading
import uuid as uuid_module
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import UTC, datetime

logger = logging.getLogger(__name__)

# Oldest items are evicted once the store holds this many
DEFAULT_MAX_ITEMS = 200


@dataclass(frozen=True)
class StoredMedia:
    """A generated media file."""

    media_id: str
    data: bytes
    content_type: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class MediaStore:
    """Bounded, thread-safe store of generated media.

    WhatsApp fetches media by URL, so every stored item gets a public URL
    under ``{public_base_url}/media/{media_id}``.
    """

    def __init__(self, public_base_url: str, max_items: int = DEFAULT_MAX_ITEMS) -> None:
        """Initialise the media store.

        :param public_base_url: Externally reachable base URL of this service.
        :param max_items: Maximum number of items kept.
        """
        self._public_base_url = public_base_url.rstrip("/")
        self._max_items = max_items
        self._items: OrderedDict[str, StoredMedia] = OrderedDict()
        self._lock = threading.Lock()

    def put(self, data: bytes, content_type: str = "image/png") -> StoredMedia:
        """Store a media file.

        :param data: Raw file content.
        :param content_type: MIME type served with the file.
        :returns: The stored item.
        """
        item = StoredMedia(media_id=uuid_module.uuid4().hex, data=data, content_type=content_type)
        with self._lock:
            self._items[item.media_id] = item
            while len(self._items) > self._max_items:
                evicted_id, _ = self._items.popitem(last=False)
                logger.debug(f"Evicted media: media_id={evicted_id}")

        logger.info(f"Stored media: media_id={item.media_id}, bytes={len(data)}")
        return item

    def get(self, media_id: str) -> StoredMedia | None:
        """Get a stored media file.

        :param media_id: Media id.
        :returns: The item, or None if unknown or evicted.
        """
        with self._lock:
            return self._items.get(media_id)

    def url_for(self, media_id: str) -> str:
        """Build the public URL of a media file.

        :param media_id: Media id.
        :returns: Absolute URL.
        """
        return f"{self._public_base_url}/media/{media_id}"

    def __len__(self) -> int:
        """Return the number of stored items."""
        with self._lock:
            return len(self._items)
