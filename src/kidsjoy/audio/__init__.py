"""Speech delivery: remote synthesis playback with a local fallback."""

from kidsjoy.audio.local_speech import LocalSpeech
from kidsjoy.audio.player import AudioPlaybackError, MixerAudioPlayer
from kidsjoy.audio.speech import SpeechOrchestrator, SpeechOutcome

__all__ = [
    "AudioPlaybackError",
    "LocalSpeech",
    "MixerAudioPlayer",
    "SpeechOrchestrator",
    "SpeechOutcome",
]
