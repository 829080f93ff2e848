"""Response caching for stationvoice TTS requests."""

from .manager import DEFAULT_TTL_SECONDS, AudioResponseCache
from .models import CacheEntry

__all__ = ["DEFAULT_TTL_SECONDS", "AudioResponseCache", "CacheEntry"]
