"""API key provider for the remote adapters.

The key is looked up explicitly through a provider object handed to each
adapter instead of being read from the environment deep inside request
code. Lookup order: ``GEMINI_API_KEY``, ``API_KEY``, then the key stored in
the application settings.

Typical usage:
    from kidsjoy.services.credentials import SettingsCredentialProvider

    credentials = SettingsCredentialProvider(get_app_settings(), prompt=ask_user_for_key)
    if not credentials.has_api_key():
        await credentials.request_new_key()
"""

import asyncio
import inspect
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from typing import Union

from kidsjoy.services.base import ICredentialProvider
from kidsjoy.settings.app_settings import AppSettings

logger = logging.getLogger(__name__)

ENV_KEYS = ("GEMINI_API_KEY", "API_KEY")

# Key-selection flow: returns a new key, or None if the user cancelled
KeyPrompt = Callable[[], Union[str, None, Awaitable[Union[str, None]]]]


class SettingsCredentialProvider(ICredentialProvider):
    """Credential provider backed by environment variables and settings.

    Attributes:
        settings: Settings object holding the stored key.
    """

    def __init__(
        self,
        settings: AppSettings,
        prompt: KeyPrompt | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            settings: Application settings (stored key, persisted on change).
            prompt: External key-selection flow. Sync or async callable.
            environ: Environment mapping (defaults to ``os.environ``).
        """
        self.settings = settings
        self._prompt = prompt
        self._environ = environ if environ is not None else os.environ
        self._lock = asyncio.Lock()

    def get_api_key(self) -> str | None:
        """Get the current API key.

        Returns:
            The first non-empty key from the environment or settings.
        """
        for name in ENV_KEYS:
            value = self._environ.get(name, "").strip()
            if value:
                return value
        return self.settings.api_key or None

    async def request_new_key(self) -> bool:
        """Run the key-selection flow and store the result.

        Concurrent callers share a single prompt.

        Returns:
            True if a key is available afterwards.
        """
        if self._prompt is None:
            logger.warning("No key-selection flow configured; set GEMINI_API_KEY")
            return self.has_api_key()

        async with self._lock:
            result = self._prompt()
            if inspect.isawaitable(result):
                result = await result

            if result:
                self.settings.set_api_key(result)
                self.settings.save()
                logger.info("Stored new API key from key-selection flow")
            else:
                logger.info("Key-selection flow cancelled")

        return self.has_api_key()
