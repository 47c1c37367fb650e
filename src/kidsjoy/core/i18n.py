"""Learner-facing strings in English and Farsi.

Strings live in config/i18n/{language}.yaml as nested mappings and are
addressed with dotted keys such as ``errors.safety``. A key missing from
the Farsi file falls back to English, and a key missing everywhere is
returned unchanged.

Typical usage:
    from kidsjoy.core.i18n import set_language, t

    set_language("fa")
    print(t("learning.added_items", count=3, category="Fruits"))
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from kidsjoy.core.resource_path import get_config_path

logger = logging.getLogger(__name__)

LANGUAGES = ("en", "fa")
FALLBACK_LANGUAGE = "en"


def _load_strings(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load strings from %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


class Translator:
    """Looks up learner-facing strings for the active language.

    Attributes:
        language: Active language code.
    """

    def __init__(self, i18n_dir: Path | None = None) -> None:
        i18n_dir = i18n_dir or get_config_path("i18n")
        self.language = FALLBACK_LANGUAGE
        self._strings = {code: _load_strings(i18n_dir / f"{code}.yaml") for code in LANGUAGES}

    def set_language(self, language: str) -> bool:
        """Switch the active language.

        Returns:
            False if the language is not one of ``LANGUAGES``.
        """
        if language not in LANGUAGES:
            logger.warning("Unsupported language: %s", language)
            return False
        self.language = language
        return True

    def translate(self, key: str, **kwargs: Any) -> str:
        """Resolve a dotted key and fill in ``str.format`` arguments."""
        text = self._find(key, self.language) or self._find(key, FALLBACK_LANGUAGE)
        if text is None:
            logger.debug("No string for %s", key)
            return key
        try:
            return text.format(**kwargs) if kwargs else text
        except KeyError as e:
            logger.warning("String %s lacks format argument %s", key, e)
            return text

    def _find(self, key: str, language: str) -> str | None:
        node: Any = self._strings.get(language, {})
        for part in key.split("."):
            if not isinstance(node, dict):
                return None
            node = node.get(part)
        return node if isinstance(node, str) else None


_translator: Translator | None = None


def get_translator() -> Translator:
    """Get the process-wide translator, creating it on first use."""
    global _translator
    if _translator is None:
        _translator = Translator()
    return _translator


def t(key: str, **kwargs: Any) -> str:
    """Translate a key with the process-wide translator."""
    return get_translator().translate(key, **kwargs)


def set_language(language: str) -> bool:
    """Switch the process-wide language."""
    return get_translator().set_language(language)
