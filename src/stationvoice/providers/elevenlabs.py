"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import logging
import os

from elevenlabs.client import ElevenLabs

from ..tts.errors import TTSAPIError, TTSAuthError, TTSEmptyAudioError, TTSError
from ..tts.models import VoiceInfo, VoiceSettings
from .base import TTSProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "eleven_multilingual_v2"
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"


def _map_error(e: Exception, fallback: str) -> TTSError:
    """Translate an SDK exception into the TTS error taxonomy."""
    status_code = getattr(e, "status_code", None)
    message = str(e)

    if status_code == 401 or "unauthorized" in message.lower() or "401" in message:
        return TTSAuthError(f"Authentication failed: {e}", e)
    if status_code == 429 or "429" in message:
        return TTSAPIError(f"Rate limit exceeded: {e}", 429, e)
    if (status_code is not None and status_code >= 500) or message[:1] == "5":
        return TTSAPIError(f"Server error: {e}", status_code, e)
    return TTSAPIError(f"{fallback}: {e}", status_code, e)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    Every synthesis uses the same model, output encoding and voice settings
    so that cached audio for a (voice, text) pair is interchangeable.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str = DEFAULT_MODEL_ID,
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID to use
            output_format: Audio encoding requested from the API
            voice_settings: Voice quality parameters (stability 0.5,
                    similarity boost 0.75 when omitted)

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.model_id = model_id
        self.output_format = output_format
        self.voice_settings = voice_settings or VoiceSettings()

        # Cache for voices to avoid repeated API calls
        self._voices_cache: list[dict] | None = None

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice ID to use for synthesis

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
            TTSEmptyAudioError: If the API returned no audio
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        # Use first available voice if not specified
        if not voice:
            voices = await self.list_voices()
            if not voices:
                raise TTSAPIError("No voices available")
            voice = voices[0]["id"]

        def _sync_convert() -> bytes:
            audio_stream = self._client.text_to_speech.convert(
                voice_id=voice,
                text=text,
                model_id=self.model_id,
                output_format=self.output_format,
                voice_settings=self.voice_settings.to_dict(),
            )
            if audio_stream is None:
                return b""
            return b"".join(audio_stream)

        try:
            # Run synchronous ElevenLabs client in thread to avoid blocking event loop
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            logger.error(f"ElevenLabs synthesis failed for voice {voice}: {e}")
            raise _map_error(e, "API call failed") from e

        if not audio_bytes:
            raise TTSEmptyAudioError("Empty audio buffer received")

        return audio_bytes

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            voices = []
            for voice in response.voices:
                info = VoiceInfo(
                    voice_id=voice.voice_id,
                    name=voice.name,
                    category=getattr(voice, "category", None),
                    description=getattr(voice, "description", None),
                    preview_url=getattr(voice, "preview_url", None),
                )
                voices.append({**info.to_dict(), "provider": "elevenlabs"})
            return voices

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _map_error(e, "Failed to list voices") from e

        self._voices_cache = voices
        return voices
