"""TTS pipeline orchestrator for stationvoice.

Coordinates a TTSProvider and the AudioResponseCache so that every entry
point (HTTP routes, CLI, library API) synthesizes station audio the same way.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from ..cache.manager import AudioResponseCache
from .errors import TTSAPIError, TTSEmptyAudioError, TTSError
from .models import SynthesisResult

if TYPE_CHECKING:
    from ..providers.base import TTSProvider

logger = logging.getLogger(__name__)


class TTSPipeline:
    """Orchestrates cache lookup, provider synthesis and cache population.

    By default only completed results are shared: two concurrent requests
    for the same uncached (voice, text) both reach the provider. With
    ``single_flight=True`` such requests join one in-flight provider call.

    Example:
        async with AudioResponseCache() as cache:
            pipeline = TTSPipeline(provider, cache, default_voice_id="Rachel")
            result = await pipeline.process("Good morning, I'm Dr Patel.")
            # SynthesisResult(audio=b"...", voice_id="Rachel", cached=False)
    """

    def __init__(
        self,
        provider: "TTSProvider",
        cache: AudioResponseCache,
        default_voice_id: str,
        single_flight: bool = False,
    ) -> None:
        """Initialize TTS pipeline.

        Args:
            provider: Synthesis backend
            cache: Started or stopped response cache (stopped caches never store)
            default_voice_id: Voice used when a request does not name one
            single_flight: Share one provider call between concurrent misses
        """
        self.provider = provider
        self.cache = cache
        self.default_voice_id = default_voice_id
        self.single_flight = single_flight
        self._inflight: dict[tuple[str, str], asyncio.Task[bytes]] = {}

        logger.debug(
            f"TTSPipeline initialized with provider={type(provider).__name__}, "
            f"default_voice_id={default_voice_id}, single_flight={single_flight}"
        )

    async def process(
        self,
        text: str | None,
        voice_id: str | None = None,
        cache: bool = True,
    ) -> SynthesisResult:
        """Return audio for text, from the cache when possible.

        Args:
            text: Text to convert to speech
            voice_id: Voice ID to use (None uses the default voice)
            cache: Whether to read and populate the response cache

        Returns:
            SynthesisResult with the audio bytes and whether they were cached

        Raises:
            ValueError: If text is missing or blank
            TTSAuthError: If provider authentication fails
            TTSAPIError: If the provider call fails
            TTSEmptyAudioError: If the provider returned no audio
        """
        if not text or not text.strip():
            raise ValueError("Text is required")

        voice_id = voice_id or self.default_voice_id

        if cache:
            cached_audio = self.cache.get(voice_id, text)
            if cached_audio is not None:
                return SynthesisResult(
                    audio=cached_audio, voice_id=voice_id, cached=True
                )

        if cache and self.single_flight:
            audio = await self._join_inflight(voice_id, text)
        else:
            audio = await self._synthesize(voice_id, text, store=cache)

        return SynthesisResult(audio=audio, voice_id=voice_id, cached=False)

    async def synthesize(self, voice_id: str | None, text: str | None) -> bytes:
        """Return audio bytes for (voice_id, text) using the response cache."""
        result = await self.process(text, voice_id)
        return result.audio

    async def list_voices(self) -> list[dict]:
        return await self.provider.list_voices()

    async def _join_inflight(self, voice_id: str, text: str) -> bytes:
        key = (voice_id, text)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._synthesize(voice_id, text, store=True))
            self._inflight[key] = task

            def _forget(done: asyncio.Task[bytes]) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug(f"Joining in-flight synthesis for voice {voice_id}")

        # One waiter being cancelled must not cancel the shared call
        return await asyncio.shield(task)

    async def _synthesize(self, voice_id: str, text: str, store: bool) -> bytes:
        logger.info(f"Synthesizing {len(text)} chars with voice {voice_id}")
        try:
            audio = await self.provider.synthesize(text, voice_id)
        except TTSError:
            raise
        except Exception as e:
            logger.error(f"Synthesis provider error: {e}")
            raise TTSAPIError(str(e) or "Failed to generate audio", None, e) from e

        if not audio:
            raise TTSEmptyAudioError("Empty audio buffer received")

        if store:
            self.cache.put(voice_id, text, audio)
        return audio
