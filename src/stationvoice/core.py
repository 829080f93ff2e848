"""Core functionality for stationvoice - wires config, providers and the pipeline."""

import logging
from pathlib import Path

from .cache import AudioResponseCache
from .config import StationVoiceConfig, load_config
from .providers import ProviderRegistry
from .providers.base import TTSProvider
from .tts.errors import TTSAPIError, TTSAuthError
from .tts.pipeline import TTSPipeline

logger = logging.getLogger(__name__)


def create_provider(config: StationVoiceConfig, name: str | None = None) -> TTSProvider:
    """Instantiate the configured synthesis provider.

    Raises:
        TTSAuthError: If the provider's API key is not configured
        KeyError: If provider not found
    """
    return ProviderRegistry.create(
        name or config.tts.provider,
        model_id=config.tts.model_id,
        output_format=config.tts.output_format,
    )


def build_pipeline(
    config: StationVoiceConfig,
    provider: TTSProvider | None = None,
    cache: AudioResponseCache | None = None,
) -> TTSPipeline:
    """Assemble a TTSPipeline from config, creating missing collaborators."""
    if provider is None:
        provider = create_provider(config)
    if cache is None:
        cache = AudioResponseCache(ttl=config.cache.ttl_seconds)
    return TTSPipeline(
        provider=provider,
        cache=cache,
        default_voice_id=config.tts.default_voice_id,
        single_flight=config.cache.single_flight,
    )


async def list_available_voices(provider: str | None = None) -> list[dict]:
    """List all available voices from specified provider.

    Args:
        provider: Provider name to list voices from (configured one if None)

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If API call fails
        KeyError: If provider not found
    """
    config = load_config()
    try:
        provider_instance = create_provider(config, provider)
        return await provider_instance.list_voices()
    except (TTSAuthError, TTSAPIError, KeyError):
        raise
    except Exception as e:
        raise TTSAPIError(f"Failed to list voices: {e}", None, e) from e


async def speak_text(
    text: str,
    voice_id: str | None = None,
    output_file: str | None = None,
    provider: str | None = None,
) -> bytes:
    """Synthesize text once, optionally saving the MP3 to a file.

    One-shot calls bypass the response cache.

    Raises:
        TTSAuthError: If API key is not configured
        TTSAPIError: If TTS conversion fails
        TTSEmptyAudioError: If the provider returned no audio
        OSError: If file save fails
        ValueError: If text is empty
        KeyError: If provider not found
    """
    config = load_config()
    pipeline = build_pipeline(config, provider=create_provider(config, provider))

    result = await pipeline.process(text, voice_id, cache=False)
    logger.debug(f"Synthesized {len(result.audio)} bytes with voice {result.voice_id}")

    if output_file:
        Path(output_file).write_bytes(result.audio)
        logger.info(f"Saved audio to {output_file}")

    return result.audio
