"""User settings management for Kids Joy.

This package provides persistent user settings storage for preferences
that should be saved across sessions, such as language and voice.
"""

from kidsjoy.settings.app_settings import (
    SUPPORTED_LANGUAGES,
    AppSettings,
    get_app_settings,
    reset_app_settings,
)

__all__ = [
    "AppSettings",
    "SUPPORTED_LANGUAGES",
    "get_app_settings",
    "reset_app_settings",
]
