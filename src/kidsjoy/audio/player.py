"""Playback of synthesized speech through pygame's mixer.

Typical usage:
    from kidsjoy.audio.player import MixerAudioPlayer

    player = MixerAudioPlayer()
    await player.play(wav_bytes)
"""

import asyncio
import io
import logging
import time

import pygame

from kidsjoy.services.base import IAudioPlayer

logger = logging.getLogger(__name__)


class AudioPlaybackError(RuntimeError):
    """Raised when audio cannot be played."""


class MixerAudioPlayer(IAudioPlayer):
    """Plays WAV bytes with ``pygame.mixer`` and waits for completion.

    Attributes:
        poll_interval: Seconds between "still playing?" checks.
    """

    def __init__(self, poll_interval: float = 0.02) -> None:
        """Initialize the player (the mixer is opened on first use).

        Args:
            poll_interval: Seconds between completion checks.
        """
        self.poll_interval = poll_interval

    async def play(self, audio: bytes) -> None:
        """Play WAV audio to completion.

        Args:
            audio: WAV file bytes.

        Raises:
            AudioPlaybackError: If the mixer cannot be opened or the
                audio cannot be decoded or played.
        """
        if not audio:
            raise AudioPlaybackError("No audio to play")
        await asyncio.to_thread(self._play_blocking, audio)

    def _play_blocking(self, audio: bytes) -> None:
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
            sound = pygame.mixer.Sound(file=io.BytesIO(audio))
        except pygame.error as e:
            raise AudioPlaybackError(f"Cannot load audio: {e}") from e

        channel = sound.play()
        if channel is None:
            raise AudioPlaybackError("No free mixer channel")

        logger.debug("Playing %.2fs of synthesized audio", sound.get_length())
        while channel.get_busy():
            time.sleep(self.poll_interval)

    def shutdown(self) -> None:
        """Close the mixer if it was opened."""
        if pygame.mixer.get_init():
            pygame.mixer.quit()
            logger.info("Audio mixer closed")
