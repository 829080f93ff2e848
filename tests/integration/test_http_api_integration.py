"""Integration tests for the station-audio HTTP API through the full app stack."""

import os
import sys
import time
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from stationvoice.providers.elevenlabs import ElevenLabsProvider
from stationvoice.server.app import create_app
from stationvoice.tts.errors import TTSAPIError

# Captured at import time because the autouse config fixture clears the env
REAL_API_KEY = os.getenv("ELEVENLABS_API_KEY")

pytestmark = pytest.mark.integration


def post_audio(client: TestClient, text: str | None, voice_id: str | None = None):
    body = {"text": text}
    if voice_id is not None:
        body["voice_id"] = voice_id
    return client.post("/api/station-audio", json=body)


class TestStationAudioCaching:
    """Test cache behavior observed from outside the service."""

    def test_repeat_within_ttl_served_without_provider_call(
        self, make_config, make_provider
    ) -> None:
        """
        INVARIANT: identical requests within the TTL reach the provider once
        BREAKS: every station prompt replay costs a paid synthesis call
        """
        provider = make_provider(audio=b"B1")
        app = create_app(make_config(), provider=provider)

        with TestClient(app) as client:
            first = post_audio(client, "Hello", "V1")
            second = post_audio(client, "Hello", "V1")

        assert first.status_code == second.status_code == 200
        assert first.content == second.content == b"B1"
        assert first.headers["content-type"] == "audio/mpeg"
        assert first.headers["content-length"] == "2"
        assert second.headers["x-cache"] == "HIT"
        assert provider.calls == [("Hello", "V1")]

    def test_different_voices_synthesized_separately(
        self, make_config, fake_provider
    ) -> None:
        app = create_app(make_config(), provider=fake_provider)

        with TestClient(app) as client:
            a = post_audio(client, "Hello", "V1")
            b = post_audio(client, "Hello", "V2")
            post_audio(client, "Hello", "V1")
            post_audio(client, "Hello", "V2")

        assert a.content != b.content
        assert fake_provider.calls == [("Hello", "V1"), ("Hello", "V2")]

    def test_entry_expires_after_ttl(self, make_config, fake_provider) -> None:
        """
        INVARIANT: cached audio is dropped a fixed time after it was stored
        BREAKS: stale audio served forever and memory grows without bound
        """
        app = create_app(make_config(ttl_seconds=0.2), provider=fake_provider)

        with TestClient(app) as client:
            post_audio(client, "Hello", "V1")
            post_audio(client, "Hello", "V1")
            assert len(fake_provider.calls) == 1

            time.sleep(0.4)

            assert client.get("/status").json()["cache"]["entries"] == 0
            response = post_audio(client, "Hello", "V1")

        assert response.headers["x-cache"] == "MISS"
        assert len(fake_provider.calls) == 2

    def test_cache_released_on_shutdown(self, make_config, fake_provider) -> None:
        """Test stopping the app cancels expiry timers and drops entries."""
        app = create_app(make_config(), provider=fake_provider)

        with TestClient(app) as client:
            post_audio(client, "Hello", "V1")
            cache = app.state.pipeline.cache
            assert len(cache) == 1

        assert cache.running is False
        assert len(cache) == 0
        assert cache._timers == {}


class TestStationAudioFailures:
    """Test failures are reported and never cached."""

    def test_empty_text_rejected_without_provider_call(
        self, make_config, fake_provider
    ) -> None:
        app = create_app(make_config(), provider=fake_provider)

        with TestClient(app) as client:
            response = post_audio(client, "", "V1")

        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}
        assert fake_provider.calls == []

    def test_provider_failure_not_cached(self, make_config, fake_provider) -> None:
        """
        INVARIANT: a failed synthesis leaves no cache entry behind
        BREAKS: one upstream blip poisons a prompt for the whole TTL
        """
        fake_provider.error = TTSAPIError("Server error: 502 bad gateway", 502)
        app = create_app(make_config(), provider=fake_provider)

        with TestClient(app) as client:
            failed = post_audio(client, "Hello", "V1")
            fake_provider.error = None
            recovered = post_audio(client, "Hello", "V1")

        assert failed.status_code == 500
        assert failed.json() == {
            "success": False,
            "error": "Server error: 502 bad gateway",
        }
        assert recovered.status_code == 200
        assert recovered.headers["x-cache"] == "MISS"
        assert len(fake_provider.calls) == 2

    def test_empty_audio_not_cached(self, make_config, make_provider) -> None:
        provider = make_provider(audio=b"")
        app = create_app(make_config(), provider=provider)

        with TestClient(app) as client:
            first = post_audio(client, "Hello", "V1")
            second = post_audio(client, "Hello", "V1")

        assert first.status_code == second.status_code == 500
        assert first.json()["success"] is False
        assert len(provider.calls) == 2


class TestSingleFlightConfig:
    """Test the single-flight option is wired from config into the app."""

    def test_single_flight_enabled_from_config(
        self, make_config, fake_provider
    ) -> None:
        app = create_app(make_config(single_flight=True), provider=fake_provider)

        with TestClient(app) as client:
            response = post_audio(client, "Hello", "V1")
            assert app.state.pipeline.single_flight is True

        assert response.status_code == 200


@pytest.mark.skipif(not REAL_API_KEY, reason="ELEVENLABS_API_KEY not set")
class TestElevenLabsEndToEnd:
    """Test the HTTP API against the real ElevenLabs service."""

    def test_station_audio_returns_mp3(self, make_config) -> None:
        provider = ElevenLabsProvider(api_key=REAL_API_KEY)
        app = create_app(
            make_config(default_voice_id="21m00Tcm4TlvDq8ikWAM"), provider=provider
        )

        with TestClient(app) as client:
            first = post_audio(client, "Please take a seat.")
            second = post_audio(client, "Please take a seat.")

        assert first.status_code == 200
        assert len(first.content) > 1000
        assert first.content[:3] == b"ID3" or first.content[0] == 0xFF
        assert second.headers["x-cache"] == "HIT"
        assert second.content == first.content
