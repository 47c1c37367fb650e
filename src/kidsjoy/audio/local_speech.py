"""On-device speech using the platform TTS engine.

This is the fallback path of the speech pipeline: it needs no network and
no API key. A new pyttsx3 engine is created for every utterance because
reusing engine instances is unreliable on macOS.

Typical usage:
    from kidsjoy.audio.local_speech import LocalSpeech

    speech = LocalSpeech(rate=150)
    await speech.speak("Apple")
"""

import asyncio
import logging
import threading

from kidsjoy.services.base import ILocalSpeech

logger = logging.getLogger(__name__)


class LocalSpeech(ILocalSpeech):
    """pyttsx3-backed speech.

    Attributes:
        rate: Speech rate in words per minute.
        voice_name: Substring of the preferred voice name, or None for the
            system default.
    """

    def __init__(self, rate: int = 150, voice_name: str | None = None) -> None:
        """Initialize local speech.

        Args:
            rate: Speech rate in words per minute.
            voice_name: Preferred voice (matched case-insensitively).
        """
        self.rate = rate
        self.voice_name = voice_name
        # pyttsx3 drivers are not safe to drive from two threads at once
        self._engine_lock = threading.Lock()

    async def speak(self, text: str) -> None:
        """Speak text and wait until it has been spoken.

        Failures are logged, never raised.

        Args:
            text: Text to speak.
        """
        if not text:
            return
        await asyncio.to_thread(self._speak_blocking, text)

    def _speak_blocking(self, text: str) -> None:
        try:
            import pyttsx3
        except ImportError:
            logger.error("pyttsx3 not installed. Run: pip install pyttsx3")
            return

        with self._engine_lock:
            try:
                engine = pyttsx3.init()
                engine.setProperty("rate", self.rate)

                if self.voice_name:
                    for voice in engine.getProperty("voices"):
                        if self.voice_name.lower() in voice.name.lower():
                            engine.setProperty("voice", voice.id)
                            break

                engine.say(text)
                engine.runAndWait()
                engine.stop()
                logger.debug("Local speech: %s", text[:30])
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Local speech failed for '%s': %s", text[:30], e)
