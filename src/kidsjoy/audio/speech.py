"""Two-tier speech delivery.

``SpeechOrchestrator.speak()`` first asks the remote synthesizer for audio
and plays it. If synthesis raises, returns no audio, or playback fails, the
same text is spoken once by the local engine. The remote path is never
retried.

Only one utterance is delivered at a time: a ``speak()`` call made while
another is in progress is dropped, not queued.

Typical usage:
    from kidsjoy.audio.speech import SpeechOrchestrator

    speech = SpeechOrchestrator(gemini, MixerAudioPlayer(), LocalSpeech())
    await speech.speak("Banana")
"""

import logging
from enum import Enum

from kidsjoy.services.base import IAudioPlayer, ILocalSpeech, ISpeechSynthesizer, Success

logger = logging.getLogger(__name__)


class SpeechOutcome(Enum):
    """How an utterance was delivered."""

    DROPPED = "dropped"  # Another utterance was in progress
    REMOTE = "remote"  # Remote audio played
    LOCAL = "local"  # Local fallback ran
    FAILED = "failed"  # Both paths failed


class SpeechOrchestrator:
    """Remote-first speech with a local fallback and single-flight guard.

    Attributes:
        is_speaking: True while an utterance is being delivered.
        last_outcome: Outcome of the most recent completed utterance.
    """

    def __init__(
        self,
        synthesizer: ISpeechSynthesizer | None,
        player: IAudioPlayer,
        local: ILocalSpeech,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            synthesizer: Remote synthesizer, or None to always speak locally.
            player: Player for remote audio.
            local: Local fallback engine.
        """
        self._synthesizer = synthesizer
        self._player = player
        self._local = local
        self._speaking = False
        self.last_outcome: SpeechOutcome | None = None

    @property
    def is_speaking(self) -> bool:
        """Check if an utterance is in progress."""
        return self._speaking

    async def speak(self, text: str) -> SpeechOutcome:
        """Speak text.

        Args:
            text: Text to speak.

        Returns:
            How the text was delivered. DROPPED if another utterance was
            in progress.
        """
        if self._speaking:
            logger.debug("Speech in progress, dropping: %s", text[:30])
            return SpeechOutcome.DROPPED

        self._speaking = True
        outcome = SpeechOutcome.FAILED
        try:
            if await self._speak_remote(text):
                outcome = SpeechOutcome.REMOTE
            else:
                logger.info("Remote speech unavailable, falling back to local speech")
                await self._local.speak(text)
                outcome = SpeechOutcome.LOCAL
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Speech failed for '%s': %s", text[:30], e)
        finally:
            self._speaking = False
            self.last_outcome = outcome

        return outcome

    async def _speak_remote(self, text: str) -> bool:
        """Try the remote path.

        Returns:
            True if remote audio was played to completion.
        """
        if self._synthesizer is None:
            return False

        try:
            result = await self._synthesizer.synthesize(text)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Remote synthesis raised: %s", e)
            return False

        if not isinstance(result, Success) or not result.payload:
            logger.debug("Remote synthesis returned no audio: %s", result)
            return False

        try:
            await self._player.play(result.payload)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Playback of remote audio failed: %s", e)
            return False

        return True
