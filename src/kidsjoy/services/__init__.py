"""Remote and local capability adapters."""

from kidsjoy.services.base import (
    Empty,
    Failure,
    FailureReason,
    GenerationResult,
    IAudioPlayer,
    IContentExpander,
    ICredentialProvider,
    IImageGenerator,
    ILocalSpeech,
    ISpeechSynthesizer,
    ITextGenerator,
    Success,
)
from kidsjoy.services.errors import MissingCredentialsError, classify_exception

__all__ = [
    "Empty",
    "Failure",
    "FailureReason",
    "GenerationResult",
    "IAudioPlayer",
    "IContentExpander",
    "ICredentialProvider",
    "IImageGenerator",
    "ILocalSpeech",
    "ISpeechSynthesizer",
    "ITextGenerator",
    "MissingCredentialsError",
    "Success",
    "classify_exception",
]
