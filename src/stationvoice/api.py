"""High-level API for stationvoice library usage."""

from pathlib import Path

from .core import speak_text


async def speak(
    text: str,
    voice: str | None = None,
    output: str | Path | None = None,
    provider: str | None = None,
) -> bytes:
    """Synthesize speech from text.

    Args:
        text: Text to speak
        voice: Voice ID (configured default voice if None)
        output: File path to save the MP3 to (nothing is written if None)
        provider: TTS provider name (configured provider if None)

    Returns:
        Audio bytes

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If TTS conversion fails
        TTSEmptyAudioError: If the provider returned no audio
        OSError: If file save fails
        ValueError: If text is empty
        KeyError: If provider not found
    """
    # Convert output to string if Path
    output_str = str(output) if output else None

    return await speak_text(
        text=text,
        voice_id=voice,
        output_file=output_str,
        provider=provider,
    )
