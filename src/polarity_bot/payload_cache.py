"""Short-lived in-memory store for payloads too large to inline in Slack."""

import json
import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from polarity_bot.data import CachedPayload

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
# Slack rejects button values longer than this
BUTTON_VALUE_LIMIT = 2000
CACHE_ID_KEY = "cacheId"

EXPIRED_NOTICE = ":hourglass: These details have expired. Please re-run the query."


class PayloadCache:
    """TTL-bounded key to string store that hands out opaque handles.

    Every entry expires ``ttl_seconds`` after it was saved. There is no size
    cap or LRU policy; expired entries are dropped when read and swept on
    every save.

    Args:
        ttl_seconds: Lifetime of each entry.
        clock: Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be greater than 0")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedPayload] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def save(self, value: str) -> str:
        """Store ``value`` and return a fresh handle for it."""
        self._sweep()
        handle = uuid.uuid4().hex
        self._entries[handle] = CachedPayload(
            id=handle,
            value=value,
            expires_at=self._clock() + self._ttl,
        )
        logger.debug("Cached %d chars under %s", len(value), handle)
        return handle

    def load(self, handle: str) -> str | None:
        """Return the stored payload, or None if unknown or expired."""
        entry = self._entries.get(handle)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[handle]
            return None
        return entry.value

    def __len__(self) -> int:
        self._sweep()
        return len(self._entries)

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]


def encode_button_value(
    payload: dict[str, Any],
    cache: PayloadCache,
    *,
    limit: int = BUTTON_VALUE_LIMIT,
) -> str:
    """Serialize ``payload`` for a Slack button, deferring it when too large.

    Payloads that fit within ``limit`` characters are inlined as JSON;
    larger ones are saved in ``cache`` and replaced by ``{"cacheId": ...}``.
    """
    encoded = json.dumps(payload, default=str)
    if len(encoded) <= limit:
        return encoded
    handle = cache.save(encoded)
    return json.dumps({CACHE_ID_KEY: handle})


def decode_button_value(value: str | None, cache: PayloadCache) -> dict[str, Any] | None:
    """Inverse of ``encode_button_value``.

    Returns:
        The original payload, ``{}`` for an empty value, or None when the
        value refers to a cache entry that has expired.
    """
    if not value:
        return {}
    decoded = json.loads(value)
    if not isinstance(decoded, dict):
        return {"value": decoded}
    if CACHE_ID_KEY not in decoded:
        return decoded
    cached = cache.load(str(decoded[CACHE_ID_KEY]))
    if cached is None:
        logger.info("Button payload %s has expired", decoded[CACHE_ID_KEY])
        return None
    return json.loads(cached)
