"""TTS data models with validation."""

from dataclasses import dataclass


@dataclass
class VoiceInfo:
    """Information about an available voice.

    Args:
        voice_id: Unique identifier for the voice
        name: Human-readable name of the voice
        category: Optional voice category (e.g., "premade", "cloned")
        description: Optional voice description
        preview_url: Optional URL of a short voice sample
    """

    voice_id: str
    name: str
    category: str | None = None
    description: str | None = None
    preview_url: str | None = None

    def __post_init__(self) -> None:
        """Validate voice information."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")
        if not self.name or not self.name.strip():
            raise ValueError("name cannot be empty")

    def to_dict(self) -> dict:
        """Return the public JSON shape used by the voices route."""
        return {
            "id": self.voice_id,
            "name": self.name,
            "description": self.description,
            "preview_url": self.preview_url,
            "category": self.category,
        }


@dataclass
class VoiceSettings:
    """Voice generation settings sent with every synthesis request.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
    """

    stability: float = 0.5
    similarity_boost: float = 0.75

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")

    def to_dict(self) -> dict[str, float]:
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
        }


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of one pipeline run.

    Args:
        audio: Synthesized MP3 bytes
        voice_id: Voice actually used (after default fallback)
        cached: True if the bytes came from the response cache
    """

    audio: bytes
    voice_id: str
    cached: bool
