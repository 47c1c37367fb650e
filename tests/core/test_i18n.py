"""Tests for the translation system."""

from pathlib import Path

import pytest

from kidsjoy.core.i18n import Translator


class TestTranslator:
    """Test suite for Translator with the bundled translations."""

    @pytest.fixture
    def translator(self) -> Translator:
        """Create a translator over the bundled files."""
        return Translator()

    def test_english_error_messages(self, translator: Translator) -> None:
        """Test the learner-facing error texts."""
        assert translator.translate("errors.credentials") == "Please check your API Key configuration."
        assert translator.translate("errors.transient").startswith("The Magic is taking a break")
        assert "too sensitive to draw" in translator.translate("errors.safety")

    def test_format_arguments(self, translator: Translator) -> None:
        """Test interpolation."""
        text = translator.translate("learning.added_items", count=3, category="Fruits")

        assert text == "3 new words added to Fruits!"

    def test_missing_key_returns_key(self, translator: Translator) -> None:
        """Test lookup of an unknown key."""
        assert translator.translate("nope.missing") == "nope.missing"

    def test_switch_language(self, translator: Translator) -> None:
        """Test switching to Persian."""
        assert translator.set_language("fa") is True
        assert translator.language == "fa"
        assert translator.translate("errors.credentials") != "Please check your API Key configuration."

    def test_unsupported_language(self, translator: Translator) -> None:
        """Test that unknown languages are refused."""
        assert translator.set_language("de") is False
        assert translator.language == "en"

    def test_falls_back_to_english(self, tmp_path: Path) -> None:
        """Test that keys missing in Persian come from English."""
        (tmp_path / "en.yaml").write_text("greeting:\n  hello: Hello\n", encoding="utf-8")
        (tmp_path / "fa.yaml").write_text("other:\n  key: value\n", encoding="utf-8")
        translator = Translator(i18n_dir=tmp_path)
        translator.set_language("fa")

        assert translator.translate("greeting.hello") == "Hello"

    def test_missing_language_file(self, tmp_path: Path) -> None:
        """Test that a language without a file serves English strings."""
        (tmp_path / "en.yaml").write_text("greeting:\n  hello: Hello\n", encoding="utf-8")
        translator = Translator(i18n_dir=tmp_path)

        assert translator.set_language("fa") is True
        assert translator.translate("greeting.hello") == "Hello"

    def test_format_argument_missing(self, tmp_path: Path) -> None:
        """Test that a string with an unfilled placeholder is returned raw."""
        (tmp_path / "en.yaml").write_text("count: '{count} words'\n", encoding="utf-8")
        translator = Translator(i18n_dir=tmp_path)

        assert translator.translate("count", other=1) == "{count} words"
