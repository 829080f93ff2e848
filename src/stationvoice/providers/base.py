"""Abstract base class for speech synthesis providers.

Every backend the station-audio service can talk to implements this
interface, which is also the seam tests use to swap in a fake provider.
"""

from abc import ABC, abstractmethod


class TTSProvider(ABC):
    """Abstract base class for text-to-speech providers.

    Voice Dictionary Structure:
        Each voice returned by list_voices() should follow this structure:
        {
            "id": str,                  # Unique identifier for the voice
            "name": str,                # Human-readable name for the voice
            "description": str | None,  # Free-form description
            "preview_url": str | None,  # Short sample of the voice
            "category": str | None,     # e.g. "premade", "cloned"
            "provider": str             # Name of the provider (e.g., "elevenlabs")
        }
    """

    @abstractmethod
    async def synthesize(self, text: str, voice: str) -> bytes:
        """Convert text to audio bytes.

        Args:
            text: The text to convert to speech
            voice: Voice ID to use for synthesis

        Returns:
            Audio data as bytes (MP3 format)

        Raises:
            TTSError: If synthesis fails
        """
        pass

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return available voices for this provider.

        Raises:
            TTSError: If voice listing fails
        """
        pass
