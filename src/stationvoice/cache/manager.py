"""Short-lived response cache for synthesized station audio.

Keeps the raw audio bytes of completed syntheses keyed by (voice, text) so
repeated requests within the TTL window are answered without contacting the
synthesis provider. Every entry expires a fixed time after it was stored,
whether or not it is read in the meantime.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from .models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


class AudioResponseCache:
    """In-memory TTL cache of synthesized audio owned by one event loop.

    Expiry is scheduled with ``loop.call_later`` when an entry is stored and
    is never pushed back by reads. The cache must be started inside a running
    event loop; stopping it cancels every pending expiry and drops all
    entries.

    Example:
        async with AudioResponseCache() as cache:
            audio = cache.get("voice-1", "Hello")
            if audio is None:
                audio = await provider.synthesize("Hello", "voice-1")
                cache.put("voice-1", "Hello", audio)
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize an empty, stopped cache.

        Args:
            ttl: Lifetime of every entry in seconds
            clock: Monotonic time source, replaceable in tests

        Raises:
            ValueError: If ttl is not positive
        """
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        self.ttl = ttl
        self._clock = clock
        self._entries: dict[tuple[str, str], CacheEntry] = {}
        self._timers: dict[tuple[str, str], asyncio.TimerHandle] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self.hits = 0
        self.misses = 0

    @property
    def running(self) -> bool:
        return self._loop is not None

    def start(self) -> None:
        """Bind the cache to the running event loop.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        logger.info(f"Audio response cache started with ttl={self.ttl}s")

    def stop(self) -> None:
        """Cancel all pending expiry timers and drop every entry."""
        for handle in self._timers.values():
            handle.cancel()
        cancelled = len(self._timers)
        self._timers.clear()
        self._entries.clear()
        self._loop = None
        logger.info(f"Audio response cache stopped ({cancelled} timers cancelled)")

    async def __aenter__(self) -> "AudioResponseCache":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.stop()

    def get(self, voice_id: str, text: str) -> bytes | None:
        """Return cached audio for (voice_id, text), or None on a miss.

        An entry that has reached its TTL counts as a miss even if its
        timer has not fired yet.
        """
        entry = self._entries.get((voice_id, text))
        if entry is None or entry.is_expired(self._clock(), self.ttl):
            self.misses += 1
            logger.debug(f"Cache miss for voice {voice_id}: '{text[:50]}'")
            return None

        self.hits += 1
        logger.debug(f"Cache hit for voice {voice_id}: '{text[:50]}'")
        return entry.audio

    def put(self, voice_id: str, text: str, audio: bytes) -> None:
        """Store audio under (voice_id, text) and schedule its expiry.

        The first writer wins: a live entry for the key is left untouched.
        Empty buffers are never stored, and nothing is stored while the
        cache is stopped.
        """
        if self._loop is None:
            logger.debug("Cache not running, skipping store")
            return
        if not audio:
            logger.debug(f"Refusing to cache empty audio for voice {voice_id}")
            return

        key = (voice_id, text)
        now = self._clock()
        current = self._entries.get(key)
        if current is not None and not current.is_expired(now, self.ttl):
            logger.debug(f"Entry already cached for voice {voice_id}, keeping it")
            return

        # Replacing an expired entry whose timer has not fired yet
        self._cancel_timer(key)

        entry = CacheEntry(voice_id=voice_id, text=text, audio=audio, created_at=now)
        self._entries[key] = entry
        self._timers[key] = self._loop.call_later(self.ttl, self._expire, key, entry)
        logger.debug(
            f"Cached {len(audio)} bytes for voice {voice_id}, expires in {self.ttl}s"
        )

    def clear(self) -> None:
        """Drop every entry but keep the cache running."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        return {
            "entries": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "ttl_seconds": self.ttl,
        }

    def __len__(self) -> int:
        # Entries past their TTL wait for their timer but are no longer live
        now = self._clock()
        return sum(
            1 for entry in self._entries.values() if not entry.is_expired(now, self.ttl)
        )

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not entry.is_expired(self._clock(), self.ttl)

    def _cancel_timer(self, key: tuple[str, str]) -> None:
        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()

    def _expire(self, key: tuple[str, str], entry: CacheEntry) -> None:
        if self._entries.get(key) is entry:
            del self._entries[key]
            self._timers.pop(key, None)
            logger.debug(f"Expired cache entry for voice {entry.voice_id}")
