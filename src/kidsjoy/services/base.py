"""Capability interfaces for the remote and local collaborators.

The controller only talks to these interfaces, so the Gemini-backed
implementations can be swapped for fakes in tests or for another provider.

Every remote call returns a ``GenerationResult``: ``Success`` with a
payload, ``Empty`` when the service answered without usable content, or
``Failure`` with a classified ``FailureReason``. Implementations should not
raise for expected service failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar, Union

if TYPE_CHECKING:
    from kidsjoy.assets.image_cache import ImageAsset
    from kidsjoy.catalog.merge import ItemDraft

T = TypeVar("T")


class FailureReason(Enum):
    """Why a remote capability did not deliver content."""

    CREDENTIAL = "credential"  # Missing, invalid or unauthorized API key
    SAFETY = "safety"  # Service declined to produce content
    TRANSIENT = "transient"  # Connectivity, quota, server errors
    NO_CONTENT = "no_content"  # Response had no image/audio part


@dataclass(frozen=True)
class Success(Generic[T]):
    """Remote call produced a payload."""

    payload: T


@dataclass(frozen=True)
class Empty:
    """Remote call succeeded but produced nothing usable."""


@dataclass(frozen=True)
class Failure:
    """Remote call failed.

    Attributes:
        reason: Classified failure reason.
        message: Diagnostic message for logs (never shown verbatim).
    """

    reason: FailureReason
    message: str = ""


GenerationResult = Union[Success[T], Empty, Failure]


class ICredentialProvider(ABC):
    """Supplies the API key used by remote adapters."""

    @abstractmethod
    def get_api_key(self) -> str | None:
        """Get the current API key, or None if none is configured."""

    def has_api_key(self) -> bool:
        """Check whether an API key is configured."""
        return bool(self.get_api_key())

    @abstractmethod
    async def request_new_key(self) -> bool:
        """Run the external key-selection flow.

        Returns:
            True if a key is available afterwards.
        """


class ITextGenerator(ABC):
    """Short natural-language completions (fun facts)."""

    @abstractmethod
    async def generate_text(self, prompt: str) -> GenerationResult[str]:
        """Complete a prompt."""


class IContentExpander(ABC):
    """Generates new vocabulary items for a category."""

    @abstractmethod
    async def expand(
        self, category_name: str, existing_names: list[str]
    ) -> GenerationResult[list[ItemDraft]]:
        """Ask for new items.

        Args:
            category_name: Category to extend.
            existing_names: Display names already present, passed as a
                hint to avoid duplicates.

        Returns:
            Drafts on success; ``Empty`` for malformed or empty responses.
        """


class ISpeechSynthesizer(ABC):
    """Remote text-to-speech."""

    @abstractmethod
    async def synthesize(self, text: str) -> GenerationResult[bytes]:
        """Synthesize speech.

        Returns:
            WAV-encoded audio on success.
        """


class IImageGenerator(ABC):
    """Remote illustration generator."""

    @abstractmethod
    async def generate_image(self, item_name: str, category_name: str) -> GenerationResult[ImageAsset]:
        """Generate an illustration for an item.

        Returns:
            The encoded image, or ``Failure(NO_CONTENT)`` when the response
            contains no image part.
        """


class ILocalSpeech(ABC):
    """Always-available on-device speech used as the fallback path."""

    @abstractmethod
    async def speak(self, text: str) -> None:
        """Speak text aloud. Should not raise for ordinary failures."""


class IAudioPlayer(ABC):
    """Plays synthesized audio."""

    @abstractmethod
    async def play(self, audio: bytes) -> None:
        """Play WAV audio to completion.

        Raises:
            Exception: Any playback failure; callers fall back to local speech.
        """
