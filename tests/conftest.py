"""Pytest configuration and fixtures for stationvoice tests."""

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stationvoice import config as config_module
from stationvoice.config import CacheConfig, HTTPConfig, StationVoiceConfig, TTSConfig
from stationvoice.providers.base import TTSProvider

ENV_VARS = (
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_DEFAULT_VOICE_ID",
    "STATIONVOICE_PROVIDER",
    "STATIONVOICE_HTTP_HOST",
    "STATIONVOICE_HTTP_PORT",
    "STATIONVOICE_API_KEY",
    "STATIONVOICE_CACHE_TTL",
    "STATIONVOICE_SINGLE_FLIGHT",
)


class FakeProvider(TTSProvider):
    """In-process synthesis provider that records every call.

    By default returns ``b"<voice>:<text>"`` so distinct voices yield
    distinct bytes.
    """

    def __init__(
        self,
        audio: bytes | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        voices: list[dict] | None = None,
    ) -> None:
        self.audio = audio
        self.error = error
        self.delay = delay
        self.voices = voices if voices is not None else [
            {
                "id": "V1",
                "name": "Rachel",
                "description": "calm",
                "preview_url": "https://example.test/v1.mp3",
                "category": "premade",
                "provider": "fake",
            }
        ]
        self.voices_error: Exception | None = None
        self.calls: list[tuple[str, str]] = []

    async def synthesize(self, text: str, voice: str) -> bytes:
        self.calls.append((text, voice))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.audio is not None:
            return self.audio
        return f"{voice}:{text}".encode()

    async def list_voices(self) -> list[dict]:
        if self.voices_error is not None:
            raise self.voices_error
        return self.voices


@pytest.fixture(autouse=True)
def isolate_config(monkeypatch, tmp_path) -> None:
    """Keep every test away from the user's real config file and env."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "CONFIG_PATH", tmp_path / "config.toml")
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def make_provider() -> Callable[..., FakeProvider]:
    """Factory for FakeProvider instances with custom behavior."""
    return FakeProvider


@pytest.fixture
def make_config() -> Callable[..., StationVoiceConfig]:
    """Factory for configs built in memory instead of from file/env."""

    def _make(
        default_voice_id: str = "DEFAULT",
        ttl_seconds: float = 300.0,
        single_flight: bool = False,
        api_key: str | None = None,
    ) -> StationVoiceConfig:
        return StationVoiceConfig(
            tts=TTSConfig(
                provider="elevenlabs",
                default_voice_id=default_voice_id,
                model_id="eleven_multilingual_v2",
                output_format="mp3_44100_128",
            ),
            http=HTTPConfig(host="127.0.0.1", port=8000, api_key=api_key),
            cache=CacheConfig(ttl_seconds=ttl_seconds, single_flight=single_flight),
        )

    return _make
