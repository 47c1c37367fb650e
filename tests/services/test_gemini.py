"""Tests for the Gemini-backed capabilities."""

import io
import wave
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors as genai_errors
from google.genai import types

from kidsjoy.assets.image_cache import ImageAsset
from kidsjoy.catalog.merge import ItemDraft
from kidsjoy.services.base import Empty, Failure, FailureReason, Success
from kidsjoy.services.credentials import SettingsCredentialProvider
from kidsjoy.services.gemini import (
    GeminiService,
    expansion_prompt,
    is_blocked,
    parse_expansion,
    pcm_to_wav,
)
from kidsjoy.settings.app_settings import AppSettings


def text_response(text: str) -> types.GenerateContentResponse:
    """Build a response with a single text part."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(role="model", parts=[types.Part(text=text)]),
                finish_reason=types.FinishReason.STOP,
            )
        ]
    )


def blob_response(data: bytes, mime_type: str) -> types.GenerateContentResponse:
    """Build a response with a single inline-data part."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(
                content=types.Content(
                    role="model",
                    parts=[types.Part(inline_data=types.Blob(data=data, mime_type=mime_type))],
                ),
                finish_reason=types.FinishReason.STOP,
            )
        ]
    )


def safety_response() -> types.GenerateContentResponse:
    """Build a response refused by the safety filter."""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(finish_reason=types.FinishReason.SAFETY)]
    )


class TestParseExpansion:
    """Test suite for parse_expansion."""

    def test_parses_array(self) -> None:
        """Test a well-formed response."""
        text = '[{"name": "Mango", "persianName": "انبه", "emoji": "🥭"}, {"name": "Kiwi", "persianName": "کیوی", "emoji": "🥝"}]'

        assert parse_expansion(text) == [
            ItemDraft("Mango", "انبه", "🥭"),
            ItemDraft("Kiwi", "کیوی", "🥝"),
        ]

    def test_strips_markdown_fence(self) -> None:
        """Test that a fenced JSON block is accepted."""
        text = '```json\n[{"name": "Mango", "persianName": "انبه", "emoji": "🥭"}]\n```'

        assert parse_expansion(text) == [ItemDraft("Mango", "انبه", "🥭")]

    @pytest.mark.parametrize("text", [None, "", "not json", '{"name": "Mango"}', "[1, 2, 3]"])
    def test_malformed_yields_nothing(self, text: str | None) -> None:
        """Test that malformed responses produce no drafts."""
        assert parse_expansion(text) == []

    def test_skips_incomplete_entries(self) -> None:
        """Test that entries missing a field are dropped."""
        text = '[{"name": "Mango", "persianName": "انبه", "emoji": "🥭"}, {"name": "Kiwi", "emoji": "🥝"}, {"name": " ", "persianName": "x", "emoji": "y"}]'

        assert parse_expansion(text) == [ItemDraft("Mango", "انبه", "🥭")]


class TestHelpers:
    """Test suite for prompt and audio helpers."""

    def test_expansion_prompt_lists_existing_names(self) -> None:
        """Test that existing names are passed as an avoid list."""
        prompt = expansion_prompt("Fruits", ["Apple", "Banana"], 10)

        assert "Generate 10 new" in prompt
        assert '"Fruits"' in prompt
        assert "Avoid: [Apple, Banana]" in prompt

    def test_pcm_to_wav(self) -> None:
        """Test that raw PCM is wrapped in a readable WAV container."""
        pcm = b"\x00\x01" * 2400

        wav_bytes = pcm_to_wav(pcm, sample_rate=24000)

        with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
            assert wav_file.getframerate() == 24000
            assert wav_file.getnchannels() == 1
            assert wav_file.getsampwidth() == 2
            assert wav_file.getnframes() == 2400

    def test_is_blocked(self) -> None:
        """Test refusal detection."""
        assert is_blocked(safety_response()) is True
        assert is_blocked(text_response("ok")) is False

    def test_is_blocked_prompt_feedback(self) -> None:
        """Test refusal detection via prompt feedback."""
        response = types.GenerateContentResponse(
            prompt_feedback=types.GenerateContentResponsePromptFeedback(
                block_reason=types.BlockedReason.SAFETY
            )
        )

        assert is_blocked(response) is True


class TestGeminiService:
    """Test suite for GeminiService."""

    @pytest.fixture
    def settings(self, tmp_path: Path) -> AppSettings:
        """Create settings stored in a temporary directory."""
        return AppSettings(api_key="test-key", _settings_path=tmp_path / "settings.json")

    @pytest.fixture
    def service(self, settings: AppSettings) -> GeminiService:
        """Create a service with a key and no environment."""
        return GeminiService(SettingsCredentialProvider(settings, environ={}), settings)

    @pytest.mark.asyncio
    async def test_missing_key_is_credential_failure(self, settings: AppSettings) -> None:
        """Test that calls without a key fail without touching the network."""
        settings.api_key = ""
        service = GeminiService(SettingsCredentialProvider(settings, environ={}), settings)

        result = await service.generate_text("hello")

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.CREDENTIAL

    @pytest.fixture
    def client(self) -> MagicMock:
        """Create a mock genai client with an async surface."""
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock(return_value=text_response("Lions roar."))
        client.aio.aclose = AsyncMock()
        return client

    @pytest.mark.asyncio
    async def test_client_closed_after_call(self, service: GeminiService, client: MagicMock) -> None:
        """Test that each call closes the client it opened."""
        with patch("kidsjoy.services.gemini.genai.Client", return_value=client) as client_cls:
            result = await service.generate_text("hello")

        assert result == Success("Lions roar.")
        client_cls.assert_called_once_with(api_key="test-key")
        client.aio.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_client_closed_after_error(self, service: GeminiService, client: MagicMock) -> None:
        """Test that a failing call still closes its client."""
        client.aio.models.generate_content.side_effect = ConnectionError("reset")

        with patch("kidsjoy.services.gemini.genai.Client", return_value=client):
            result = await service.generate_text("hello")

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.TRANSIENT
        client.aio.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_generate_text(self, service: GeminiService) -> None:
        """Test a text completion."""
        with patch.object(service, "_generate", AsyncMock(return_value=text_response(" Bananas are berries! "))):
            result = await service.generate_text("fact please")

        assert result == Success("Bananas are berries!")

    @pytest.mark.asyncio
    async def test_generate_text_empty(self, service: GeminiService) -> None:
        """Test that an empty answer is Empty."""
        with patch.object(service, "_generate", AsyncMock(return_value=text_response("   "))):
            result = await service.generate_text("fact please")

        assert result == Empty()

    @pytest.mark.asyncio
    async def test_expand(self, service: GeminiService, settings: AppSettings) -> None:
        """Test an expansion request and its parsed drafts."""
        response = text_response('[{"name": "Mango", "persianName": "انبه", "emoji": "🥭"}]')
        generate = AsyncMock(return_value=response)

        with patch.object(service, "_generate", generate):
            result = await service.expand("Fruits", ["Apple"])

        assert result == Success([ItemDraft("Mango", "انبه", "🥭")])
        model, prompt, config = generate.call_args.args
        assert model == settings.text_model
        assert "Avoid: [Apple]" in prompt
        assert config.response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_expand_malformed_is_empty(self, service: GeminiService) -> None:
        """Test that a malformed expansion is Empty, not a failure."""
        with patch.object(service, "_generate", AsyncMock(return_value=text_response("oops"))):
            result = await service.expand("Fruits", [])

        assert result == Empty()

    @pytest.mark.asyncio
    async def test_expand_transport_error_is_transient(self, service: GeminiService) -> None:
        """Test that a connection error is classified as transient."""
        with patch.object(service, "_generate", AsyncMock(side_effect=ConnectionError("reset"))):
            result = await service.expand("Fruits", [])

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.TRANSIENT

    @pytest.mark.asyncio
    async def test_expand_rejected_key(self, service: GeminiService) -> None:
        """Test that a 401 response is a credential failure."""
        error = genai_errors.ClientError(401, {"error": {"message": "bad key"}})

        with patch.object(service, "_generate", AsyncMock(side_effect=error)):
            result = await service.expand("Fruits", [])

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.CREDENTIAL

    @pytest.mark.asyncio
    async def test_generate_image(self, service: GeminiService) -> None:
        """Test that the first inline image part is returned."""
        response = blob_response(b"\x89PNGdata", "image/png")

        with patch.object(service, "_generate", AsyncMock(return_value=response)):
            result = await service.generate_image("Apple", "Fruits")

        assert result == Success(ImageAsset(data=b"\x89PNGdata", mime_type="image/png"))

    @pytest.mark.asyncio
    async def test_generate_image_safety(self, service: GeminiService) -> None:
        """Test that a refused image is a safety failure."""
        with patch.object(service, "_generate", AsyncMock(return_value=safety_response())):
            result = await service.generate_image("Apple", "Fruits")

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.SAFETY

    @pytest.mark.asyncio
    async def test_generate_image_without_image_part(self, service: GeminiService) -> None:
        """Test that a text-only answer is a no-content failure."""
        with patch.object(service, "_generate", AsyncMock(return_value=text_response("I can't draw"))):
            result = await service.generate_image("Apple", "Fruits")

        assert isinstance(result, Failure)
        assert result.reason is FailureReason.NO_CONTENT

    @pytest.mark.asyncio
    async def test_synthesize_wraps_pcm(self, service: GeminiService) -> None:
        """Test that raw PCM audio is returned as WAV."""
        response = blob_response(b"\x00\x00" * 100, "audio/L16;codec=pcm;rate=24000")

        with patch.object(service, "_generate", AsyncMock(return_value=response)):
            result = await service.synthesize("Banana")

        assert isinstance(result, Success)
        assert result.payload[:4] == b"RIFF"

    @pytest.mark.asyncio
    async def test_synthesize_no_audio(self, service: GeminiService) -> None:
        """Test that a response without audio is Empty."""
        with patch.object(service, "_generate", AsyncMock(return_value=text_response("hi"))):
            result = await service.synthesize("Banana")

        assert result == Empty()
