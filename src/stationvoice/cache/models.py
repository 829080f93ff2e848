"""Data models for the response cache."""

from dataclasses import dataclass


@dataclass
class CacheEntry:
    """Cached synthesis result for one (voice, text) pair.

    Attributes:
        voice_id: Voice identifier used for synthesis
        text: Original input text for TTS
        audio: Synthesized audio bytes
        created_at: Clock reading when the entry was stored
    """

    voice_id: str
    text: str
    audio: bytes
    created_at: float

    @property
    def key(self) -> tuple[str, str]:
        return (self.voice_id, self.text)

    def is_expired(self, now: float, ttl: float) -> bool:
        """Return True once the entry has lived for ``ttl`` seconds or more."""
        return now - self.created_at >= ttl
