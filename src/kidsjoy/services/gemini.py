"""Gemini-backed implementations of the remote capabilities.

A fresh ``genai.Client`` is built for every call so that a key supplied by
the key-selection flow takes effect immediately. Its transport is closed
when the call ends.

Typical usage:
    from kidsjoy.services.gemini import GeminiService

    gemini = GeminiService(credentials, settings)
    result = await gemini.expand("Fruits", ["Apple", "Banana"])
    if isinstance(result, Success):
        drafts = result.payload
"""

import io
import json
import logging
import re
import wave
from typing import Any

from google import genai
from google.genai import types

from kidsjoy.assets.image_cache import ImageAsset
from kidsjoy.catalog.merge import ItemDraft
from kidsjoy.services.base import (
    Empty,
    Failure,
    FailureReason,
    GenerationResult,
    ICredentialProvider,
    IContentExpander,
    IImageGenerator,
    ISpeechSynthesizer,
    ITextGenerator,
    Success,
)
from kidsjoy.services.errors import MissingCredentialsError, classify_exception
from kidsjoy.settings.app_settings import AppSettings

logger = logging.getLogger(__name__)

# Finish/block reasons that mean the service refused on content grounds
SAFETY_REASONS = {
    "SAFETY",
    "IMAGE_SAFETY",
    "PROHIBITED_CONTENT",
    "IMAGE_PROHIBITED_CONTENT",
    "BLOCKLIST",
    "SPII",
}

# Gemini TTS returns raw 16-bit mono PCM
DEFAULT_PCM_RATE = 24000

EXPANSION_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            "name": types.Schema(type=types.Type.STRING),
            "persianName": types.Schema(type=types.Type.STRING),
            "emoji": types.Schema(type=types.Type.STRING),
        },
        required=["name", "persianName", "emoji"],
    ),
)


def fun_fact_prompt(item_name: str, category_name: str) -> str:
    """Prompt for a short child-friendly fact."""
    return (
        f'Tell me a very short, simple, and fun fact for a child about "{item_name}" '
        f'in category "{category_name}".'
    )


def expansion_prompt(category_name: str, existing_names: list[str], count: int) -> str:
    """Prompt for new vocabulary items."""
    return (
        f'Generate {count} new English vocabulary items for children in the category "{category_name}".\n'
        f"Avoid: [{', '.join(existing_names)}].\n"
        'Return ONLY a raw JSON array of objects: [{"name": "English", "persianName": "Farsi", "emoji": "🍎"}].'
    )


def image_prompt(item_name: str, category_name: str) -> str:
    """Prompt for an item illustration."""
    return (
        f"A clean, cute 3D cartoon illustration of a {item_name} ({category_name}) "
        "on white background. High quality, vibrant style for kids."
    )


def parse_expansion(text: str | None) -> list[ItemDraft]:
    """Parse the JSON array returned for an expansion request.

    Malformed JSON, a non-array document or entries missing a field are
    tolerated: the result only holds well-formed entries.

    Args:
        text: Raw response text.

    Returns:
        Parsed drafts (possibly empty).
    """
    if not text:
        return []

    cleaned = text.strip()
    # Strip markdown fences
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?\s*|\s*```$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("Expansion response is not valid JSON: %s", cleaned[:80])
        return []

    if not isinstance(data, list):
        logger.warning("Expansion response is not a JSON array")
        return []

    drafts = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        persian_name = entry.get("persianName")
        emoji = entry.get("emoji")
        if not all(isinstance(value, str) and value.strip() for value in (name, persian_name, emoji)):
            logger.debug("Skipping incomplete expansion entry: %s", entry)
            continue
        drafts.append(
            ItemDraft(name=name.strip(), localized_name=persian_name.strip(), emoji=emoji.strip())
        )
    return drafts


def pcm_to_wav(pcm: bytes, sample_rate: int = DEFAULT_PCM_RATE, channels: int = 1) -> bytes:
    """Wrap raw 16-bit PCM in a WAV container.

    Args:
        pcm: Little-endian 16-bit samples.
        sample_rate: Sample rate in Hz.
        channels: Channel count.

    Returns:
        WAV file bytes.
    """
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def _pcm_rate(mime_type: str | None) -> int:
    match = re.search(r"rate=(\d+)", mime_type or "")
    return int(match.group(1)) if match else DEFAULT_PCM_RATE


def _reason_name(reason: Any) -> str | None:
    if reason is None:
        return None
    return getattr(reason, "name", str(reason))


def is_blocked(response: Any) -> bool:
    """Check whether a response was refused on content-policy grounds."""
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and getattr(feedback, "block_reason", None):
        return True
    for candidate in getattr(response, "candidates", None) or []:
        if _reason_name(getattr(candidate, "finish_reason", None)) in SAFETY_REASONS:
            return True
    return False


def _inline_parts(response: Any) -> list[Any]:
    """Collect inline-data parts of the first candidate."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return []
    return [part.inline_data for part in candidates[0].content.parts or [] if part.inline_data]


class GeminiService(ITextGenerator, IContentExpander, ISpeechSynthesizer, IImageGenerator):
    """Remote capabilities backed by the Gemini API.

    Attributes:
        settings: Model, voice and batch-size settings.
    """

    def __init__(self, credentials: ICredentialProvider, settings: AppSettings) -> None:
        """Initialize the service.

        Args:
            credentials: API key provider.
            settings: Application settings.
        """
        self._credentials = credentials
        self.settings = settings

    def _client(self) -> genai.Client:
        api_key = self._credentials.get_api_key()
        if not api_key:
            raise MissingCredentialsError()
        return genai.Client(api_key=api_key)

    async def _generate(self, model: str, contents: Any, config: types.GenerateContentConfig | None = None) -> Any:
        client = self._client()
        try:
            return await client.aio.models.generate_content(model=model, contents=contents, config=config)
        finally:
            await client.aio.aclose()

    async def generate_text(self, prompt: str) -> GenerationResult[str]:
        """Complete a prompt with the text model."""
        try:
            response = await self._generate(self.settings.text_model, prompt)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._failure("generate_text", e)

        if is_blocked(response):
            return Failure(FailureReason.SAFETY, "text response blocked")
        text = (response.text or "").strip()
        return Success(text) if text else Empty()

    async def expand(self, category_name: str, existing_names: list[str]) -> GenerationResult[list[ItemDraft]]:
        """Ask for new vocabulary items for a category."""
        prompt = expansion_prompt(category_name, existing_names, self.settings.expansion_count)
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=EXPANSION_SCHEMA,
        )
        try:
            response = await self._generate(self.settings.text_model, prompt, config)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._failure("expand", e)

        if is_blocked(response):
            return Failure(FailureReason.SAFETY, "expansion response blocked")

        drafts = parse_expansion(response.text)
        logger.info("Expansion for %s returned %d items", category_name, len(drafts))
        return Success(drafts) if drafts else Empty()

    async def synthesize(self, text: str) -> GenerationResult[bytes]:
        """Synthesize speech with the prebuilt voice.

        Returns:
            WAV bytes on success.
        """
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.settings.voice_name)
                )
            ),
        )
        try:
            response = await self._generate(self.settings.speech_model, f"Say clearly: {text}", config)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._failure("synthesize", e)

        for blob in _inline_parts(response):
            if not blob.data:
                continue
            mime_type = blob.mime_type or ""
            if "wav" in mime_type:
                return Success(blob.data)
            return Success(pcm_to_wav(blob.data, _pcm_rate(mime_type)))

        if is_blocked(response):
            return Failure(FailureReason.SAFETY, "speech response blocked")
        return Empty()

    async def generate_image(self, item_name: str, category_name: str) -> GenerationResult[ImageAsset]:
        """Generate a square illustration for an item."""
        config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio="1:1"),
        )
        try:
            response = await self._generate(
                self.settings.image_model, image_prompt(item_name, category_name), config
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._failure("generate_image", e)

        for blob in _inline_parts(response):
            if blob.data:
                return Success(ImageAsset(data=blob.data, mime_type=blob.mime_type or "image/png"))

        if is_blocked(response):
            return Failure(FailureReason.SAFETY, f"image for {item_name} blocked")
        return Failure(FailureReason.NO_CONTENT, f"no image part for {item_name}")

    @staticmethod
    def _failure(operation: str, exc: Exception) -> Failure:
        reason = classify_exception(exc)
        logger.warning("Gemini %s failed (%s): %s", operation, reason.value, exc)
        return Failure(reason, str(exc))
