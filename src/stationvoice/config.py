"""Configuration management for stationvoice.

Loads configuration from ~/.config/stationvoice/config.toml when present.
Priority chain: CLI flags > env vars > config file > built-in defaults.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .cache import DEFAULT_TTL_SECONDS
from .providers.elevenlabs import DEFAULT_MODEL_ID, DEFAULT_OUTPUT_FORMAT

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "stationvoice"
CONFIG_PATH = CONFIG_DIR / "config.toml"

# Rachel
FALLBACK_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"

DEFAULT_CONFIG = f"""\
# stationvoice configuration

[tts]
# Synthesis provider name
provider = "elevenlabs"

# Voice used when a request does not name one
# (ELEVENLABS_DEFAULT_VOICE_ID overrides this)
default_voice_id = "{FALLBACK_VOICE_ID}"

model_id = "{DEFAULT_MODEL_ID}"
output_format = "{DEFAULT_OUTPUT_FORMAT}"

[http]
# Bind address: "127.0.0.1" = localhost only, "0.0.0.0" = allow LAN access
host = "127.0.0.1"
port = 8000

[cache]
# Seconds a synthesized clip stays cached; reads do not extend it
ttl_seconds = {DEFAULT_TTL_SECONDS}

# Collapse concurrent identical requests into one provider call
single_flight = false

# Secrets are read from environment variables, not this file:
#   ELEVENLABS_API_KEY    - ElevenLabs provider
#   STATIONVOICE_API_KEY  - HTTP API authentication
"""

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TTSConfig:
    """TTS provider configuration."""

    provider: str
    default_voice_id: str
    model_id: str
    output_format: str


@dataclass(frozen=True)
class HTTPConfig:
    """HTTP API configuration."""

    host: str
    port: int
    api_key: str | None = None


@dataclass(frozen=True)
class CacheConfig:
    """Response cache configuration."""

    ttl_seconds: float
    single_flight: bool


@dataclass(frozen=True)
class StationVoiceConfig:
    """Top-level stationvoice configuration."""

    tts: TTSConfig
    http: HTTPConfig
    cache: CacheConfig


_cached_config: StationVoiceConfig | None = None


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    path = path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_config(path: Path | None = None) -> StationVoiceConfig:
    """Load configuration from the config file with env var overrides.

    A missing config file is not an error: built-in defaults apply.

    Args:
        path: Alternate config file location (bypasses the memoized config)

    Returns:
        Loaded and validated StationVoiceConfig.

    Raises:
        ValueError: If a numeric setting cannot be parsed or is out of range.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or CONFIG_PATH
    data: dict = {}
    if config_path.exists():
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        logger.debug(f"Loaded config from {config_path}")

    tts = data.get("tts", {})
    http_cfg = data.get("http", {})
    cache = data.get("cache", {})

    port_str = os.getenv("STATIONVOICE_HTTP_PORT", str(http_cfg.get("port", 8000)))
    ttl_str = os.getenv(
        "STATIONVOICE_CACHE_TTL", str(cache.get("ttl_seconds", DEFAULT_TTL_SECONDS))
    )
    try:
        port = int(port_str)
        ttl_seconds = float(ttl_str)
    except ValueError as e:
        raise ValueError(f"Invalid numeric setting in {config_path}: {e}") from e
    if ttl_seconds <= 0:
        raise ValueError(f"cache ttl must be positive, got {ttl_seconds}")

    config = StationVoiceConfig(
        tts=TTSConfig(
            provider=os.getenv(
                "STATIONVOICE_PROVIDER", tts.get("provider", "elevenlabs")
            ),
            default_voice_id=os.getenv("ELEVENLABS_DEFAULT_VOICE_ID")
            or tts.get("default_voice_id", FALLBACK_VOICE_ID),
            model_id=tts.get("model_id", DEFAULT_MODEL_ID),
            output_format=tts.get("output_format", DEFAULT_OUTPUT_FORMAT),
        ),
        http=HTTPConfig(
            host=os.getenv("STATIONVOICE_HTTP_HOST", http_cfg.get("host", "127.0.0.1")),
            port=port,
            api_key=os.getenv("STATIONVOICE_API_KEY") or None,
        ),
        cache=CacheConfig(
            ttl_seconds=ttl_seconds,
            single_flight=_env_bool(
                "STATIONVOICE_SINGLE_FLIGHT", bool(cache.get("single_flight", False))
            ),
        ),
    )

    if path is None:
        _cached_config = config
    return config


def reset_config() -> None:
    """Forget the memoized config so the next load re-reads file and env."""
    global _cached_config
    _cached_config = None
