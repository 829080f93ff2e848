"""TTS (Text-to-Speech) package for stationvoice.

Error taxonomy and data models shared by providers, the synthesis
pipeline and the HTTP server.
"""

from .errors import TTSAPIError, TTSAuthError, TTSEmptyAudioError, TTSError
from .models import SynthesisResult, VoiceInfo, VoiceSettings

__all__ = [
    "SynthesisResult",
    "TTSAPIError",
    "TTSAuthError",
    "TTSEmptyAudioError",
    "TTSError",
    "VoiceInfo",
    "VoiceSettings",
]
