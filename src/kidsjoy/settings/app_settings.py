"""Application settings management.

This module manages user preferences: interface language, the image cache
epoch, model and voice selection for the generative service, the local
speech rate, and an optionally stored API key.

Settings are stored in ~/.kidsjoy/settings.json under the "app" key.

Typical usage:
    from kidsjoy.settings import get_app_settings

    settings = get_app_settings()
    settings.set_language("fa")
    settings.save()
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from kidsjoy.assets.image_cache import is_valid_epoch
from kidsjoy.core.resource_path import get_user_data_dir

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "fa")

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_SPEECH_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_VOICE_NAME = "Kore"
DEFAULT_CACHE_EPOCH = "v5"
DEFAULT_SPEECH_RATE = 150
DEFAULT_EXPANSION_COUNT = 10


def _default_settings_path() -> Path:
    return get_user_data_dir() / "settings.json"


@dataclass
class AppSettings:
    """Application settings with persistence.

    Attributes:
        language: Interface language code ("en" or "fa").
        cache_epoch: Epoch tag for generated image cache keys. Changing it
            makes every previously cached image unreachable.
        text_model: Model used for fun facts and category expansion.
        speech_model: Model used for remote speech synthesis.
        image_model: Model used for illustrations.
        voice_name: Prebuilt remote voice name.
        speech_rate: Local fallback speech rate in words per minute.
        expansion_count: Number of items requested per expansion.
        api_key: Stored API key ("" if none; environment variables win).
    """

    language: str = "en"
    cache_epoch: str = DEFAULT_CACHE_EPOCH
    text_model: str = DEFAULT_TEXT_MODEL
    speech_model: str = DEFAULT_SPEECH_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    voice_name: str = DEFAULT_VOICE_NAME
    speech_rate: int = DEFAULT_SPEECH_RATE
    expansion_count: int = DEFAULT_EXPANSION_COUNT
    api_key: str = ""
    _settings_path: Path = field(default_factory=_default_settings_path)
    _dirty: bool = field(default=False, repr=False)

    def set_language(self, language: str) -> None:
        """Set interface language.

        Args:
            language: "en" or "fa". Other values are ignored.
        """
        if language in SUPPORTED_LANGUAGES:
            self.language = language
            self._dirty = True

    def set_cache_epoch(self, epoch: str) -> None:
        """Set the image cache epoch.

        Args:
            epoch: New epoch tag (letters and digits). Other values are ignored.
        """
        if is_valid_epoch(epoch):
            self.cache_epoch = epoch
            self._dirty = True

    def set_voice(self, voice_name: str, speech_rate: int | None = None) -> None:
        """Set the remote voice and optionally the local speech rate.

        Args:
            voice_name: Prebuilt voice name.
            speech_rate: Local speech rate in WPM (unchanged if None).
        """
        self.voice_name = voice_name
        if speech_rate is not None:
            self.speech_rate = speech_rate
        self._dirty = True

    def set_api_key(self, api_key: str) -> None:
        """Store an API key.

        Args:
            api_key: Key string ("" to clear).
        """
        self.api_key = api_key.strip()
        self._dirty = True

    def load(self, path: Path | str | None = None) -> bool:
        """Load settings from file.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.kidsjoy/settings.json.

        Returns:
            True if loaded successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        if not self._settings_path.exists():
            logger.info("No settings file found, using defaults")
            return False

        try:
            with open(self._settings_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError, RecursionError) as e:
            logger.error("Failed to load settings: %s", e)
            return False

        app_data = data.get("app", {}) if isinstance(data, dict) else {}
        if not isinstance(app_data, dict):
            logger.error("Settings 'app' section is not an object, using defaults")
            return False

        language = app_data.get("language", "en")
        self.language = language if language in SUPPORTED_LANGUAGES else "en"
        cache_epoch = app_data.get("cache_epoch", DEFAULT_CACHE_EPOCH)
        if not is_valid_epoch(cache_epoch):
            logger.warning("Invalid cache epoch %r, using %s", cache_epoch, DEFAULT_CACHE_EPOCH)
            cache_epoch = DEFAULT_CACHE_EPOCH
        self.cache_epoch = cache_epoch
        self.text_model = app_data.get("text_model", DEFAULT_TEXT_MODEL)
        self.speech_model = app_data.get("speech_model", DEFAULT_SPEECH_MODEL)
        self.image_model = app_data.get("image_model", DEFAULT_IMAGE_MODEL)
        self.voice_name = app_data.get("voice_name", DEFAULT_VOICE_NAME)
        self.speech_rate = int(app_data.get("speech_rate", DEFAULT_SPEECH_RATE))
        self.expansion_count = int(app_data.get("expansion_count", DEFAULT_EXPANSION_COUNT))
        self.api_key = app_data.get("api_key", "")

        self._dirty = False
        logger.info("Loaded settings from %s", self._settings_path)
        return True

    def save(self, path: Path | str | None = None) -> bool:
        """Save settings to file.

        Args:
            path: Optional path to settings file.
                 Defaults to ~/.kidsjoy/settings.json.

        Returns:
            True if saved successfully, False otherwise.
        """
        if path is not None:
            self._settings_path = Path(path)

        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)

            # Preserve sections written by other components
            existing_data: dict[str, Any] = {}
            if self._settings_path.exists():
                with open(self._settings_path, encoding="utf-8") as f:
                    existing_data = json.load(f)

            existing_data["app"] = self.to_dict()

            with open(self._settings_path, "w", encoding="utf-8") as f:
                json.dump(existing_data, f, indent=2)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to save settings: %s", e)
            return False

        self._dirty = False
        logger.info("Saved settings to %s", self._settings_path)
        return True

    @property
    def is_dirty(self) -> bool:
        """Check if settings have unsaved changes."""
        return self._dirty

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "language": self.language,
            "cache_epoch": self.cache_epoch,
            "text_model": self.text_model,
            "speech_model": self.speech_model,
            "image_model": self.image_model,
            "voice_name": self.voice_name,
            "speech_rate": self.speech_rate,
            "expansion_count": self.expansion_count,
            "api_key": self.api_key,
        }


# Global singleton instance
_global_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    """Get the global settings singleton.

    Loads settings from disk on first access.

    Returns:
        AppSettings instance.
    """
    global _global_settings
    if _global_settings is None:
        _global_settings = AppSettings()
        _global_settings.load()
    return _global_settings


def reset_app_settings() -> None:
    """Reset the global settings singleton.

    Forces reload on next access.
    """
    global _global_settings
    _global_settings = None
